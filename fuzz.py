#!/usr/bin/env python3
"""
Random fuzzer for the Shuttle parser.
Generates malformed Shuttle source and checks that parsing never raises,
never hangs, and always yields a tree the serializer accepts.
"""

import argparse
import random
import string
import sys
import time
import traceback

from shuttle import parse, serialize

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "ul", "ol", "li",
    "form", "input", "button", "textarea", "h1", "h2", "section", "article",
    "br", "hr", "meta", "link", "source", "track", "wbr", "col", "embed",
    "data-x", "x:y", "_private", "a.b",
]

VOID_TAGS = ["area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"]

BAD_TAG_NAMES = ["", "1p", "-x", "p@", "&amp;", "\"q\"", "=", "é"]

PROPERTY_NAMES = [
    "id", "class", "style", "href", "src", "alt", "title", "name", "value", "type",
    "checked", "disabled", "data-x", "aria-label", "xml:lang", "_x", "a.b",
]

BAD_PROPERTY_NAMES = ["data@x", "a+b", "c!", "x$y"]

ENTITIES = [
    "&amp;", "&lt;", "&gt;", "&quot;", "&equals;", "&nbsp;",
    "&", "&amp", "&ampamp;", "&#", "&#x", "&#123;", "&#x1f;",
    "&#xdeadbeef;", "&#99999999;", "&#-1;", "&#x;", "&unknown;",
    "&#0;", "&#xD800;", "&#x10FFFF;", "&#x110000;",
    "&CounterClockwiseContourIntegral;", "&" + "a" * 40 + ";",
]

SPECIAL_CHARS = [
    "\x00", "\x0b", "\x0c",  # Control chars
    "\u00a0", "\u2028", "\u200b", "\ufeff", "\ufffd",  # Non-ASCII whitespace-like and specials
    "\"", "=", "!",
]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace():
    """Generate random whitespace (including characters Shuttle does not treat as whitespace)."""
    ws = [" ", "\t", "\n", "\r", "\f", "\v", ""]
    return "".join(random.choices(ws, k=random.randint(0, 4)))


def fuzz_tag_name():
    if random.random() < 0.15:
        return random.choice(BAD_TAG_NAMES)
    return random.choice(TAGS)


def fuzz_property():
    """Generate well-formed and malformed properties."""
    name = random.choice(BAD_PROPERTY_NAMES) if random.random() < 0.1 else random.choice(PROPERTY_NAMES)
    strategies = [
        lambda: f"{name}={random_string(1, 10)}",
        lambda: f'{name}="{fuzz_text()}"',
        lambda: f"{name}=",
        lambda: f'{name}=""',
        lambda: f'{name}="{random_string(0, 10)}',  # unterminated
        lambda: f'{name}="a (b) c"',
        lambda: f"{name}={random.choice(ENTITIES)}",
        lambda: f"{name}&equals;{random_string(1, 5)}",
    ]
    return random.choice(strategies)()


def fuzz_comment():
    strategies = [
        lambda: f"(!{fuzz_text()}!)",
        lambda: f"(! {random_string()} (! nested !) {random_string()} !)",
        lambda: f"(!{random_string()}",  # unterminated
        lambda: "(!!)",
        lambda: "(!)",
    ]
    return random.choice(strategies)()


def fuzz_text():
    parts = []
    for _ in range(random.randint(0, 6)):
        roll = random.random()
        if roll < 0.5:
            parts.append(random_string(1, 12))
        elif roll < 0.7:
            parts.append(random.choice(ENTITIES))
        elif roll < 0.85:
            parts.append(random.choice(SPECIAL_CHARS))
        else:
            parts.append(random_whitespace() or " ")
    return "".join(parts)


def fuzz_element(depth=0, max_depth=8):
    """Generate a (possibly malformed) element with properties and content."""
    tag = fuzz_tag_name()
    parts = ["(", random_whitespace() if random.random() < 0.1 else "", tag]
    for _ in range(random.randint(0, 3)):
        parts.append(" ")
        parts.append(fuzz_property())
    for _ in range(random.randint(0, 4)):
        parts.append(random_whitespace() or " ")
        roll = random.random()
        if roll < 0.35 and depth < max_depth:
            parts.append(fuzz_element(depth + 1, max_depth))
        elif roll < 0.45:
            parts.append(fuzz_comment())
        elif roll < 0.5:
            parts.append(fuzz_property())  # property after content
        else:
            parts.append(fuzz_text())
    # Sometimes leave the element open
    if random.random() > 0.1:
        parts.append(")")
    return "".join(parts)


def fuzz_void_with_content():
    return f"({random.choice(VOID_TAGS)} {fuzz_text()} {fuzz_element(6)})"


def fuzz_deeply_nested():
    depth = random.randint(50, 600)
    return "(div " * depth + random_string() + ")" * random.randint(0, depth + 2)


def fuzz_stray_parens():
    return "".join(random.choices(["(", ")", " ", "x", "(!", "!)"], k=random.randint(1, 30)))


def generate_fuzzed_source():
    """Generate a complete fuzzed Shuttle document."""
    parts = []
    for _ in range(random.randint(1, 12)):
        element_type = random.choices(
            [
                fuzz_element,
                fuzz_comment,
                fuzz_text,
                fuzz_void_with_content,
                fuzz_deeply_nested,
                fuzz_stray_parens,
            ],
            weights=[40, 8, 10, 6, 2, 6],
        )[0]
        parts.append(element_type())
        parts.append(random_whitespace())
    return "".join(parts)


def check_source(source, recovery):
    """Parse and serialize one input; any exception propagates to the caller."""
    document, errors = parse(source, recovery=recovery)
    html = serialize(document)
    if recovery == "strict" and len(errors) > 1:
        raise AssertionError(f"strict mode collected {len(errors)} errors")
    again, _ = parse(source, recovery=recovery)
    if serialize(again) != html:
        raise AssertionError("non-deterministic output")
    return html


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False, recovery="lenient"):
    """Run the fuzzer against the Shuttle parser."""
    if seed is not None:
        random.seed(seed)

    crashes = []
    hangs = []
    successes = 0

    print(f"Fuzzing shuttle ({recovery}) with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        source = generate_fuzzed_source()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        try:
            start = time.perf_counter()
            check_source(source, recovery)
            elapsed = time.perf_counter() - start

            if elapsed > 5.0:
                hangs.append({"test_num": i, "source": source, "time": elapsed})
                if verbose:
                    print(f"  HANG: Test {i} took {elapsed:.2f}s")
            else:
                successes += 1

        except Exception as e:
            crashes.append({
                "test_num": i,
                "source": source,
                "error": str(e),
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")

    elapsed_total = max(time.time() - start_time, 1e-9)

    print(f"\n{'='*60}")
    print(f"FUZZING RESULTS: shuttle ({recovery})")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")
    print(f"Tests/second:   {num_tests/elapsed_total:.1f}")

    if crashes:
        print(f"\n{'='*60}")
        print("CRASH DETAILS:")
        print(f"{'='*60}")
        for crash in crashes[:10]:
            print(f"\nTest #{crash['test_num']}:")
            print(f"  Source: {crash['source'][:200]!r}...")
            print(f"  Error: {crash['error']}")
        if len(crashes) > 10:
            print(f"\n... and {len(crashes) - 10} more crashes")

    if hangs:
        print(f"\n{'='*60}")
        print("HANG DETAILS:")
        print(f"{'='*60}")
        for hang in hangs[:5]:
            print(f"\nTest #{hang['test_num']} ({hang['time']:.2f}s):")
            print(f"  Source: {hang['source'][:200]!r}...")

    if save_failures and (crashes or hangs):
        filename = f"fuzz_failures_shuttle_{int(time.time())}.txt"
        with open(filename, "w", encoding="utf-8") as f:
            f.write(f"Fuzzing results for shuttle ({recovery})\n")
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"Source:\n{crash['source']}\n")
                f.write(f"Error: {crash['error']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for hang in hangs:
                f.write(f"=== HANG #{hang['test_num']} ({hang['time']:.2f}s) ===\n")
                f.write(f"Source:\n{hang['source']}\n\n")
        print(f"\nFailures saved to {filename}")

    return len(crashes) == 0 and len(hangs) == 0


def main():
    parser = argparse.ArgumentParser(description="Fuzz the Shuttle parser with malformed input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Parse in strict recovery mode",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--save-failures",
        action="store_true",
        help="Save failures to a file",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed documents (no parsing)",
    )

    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_source())
            print()
        return

    success = run_fuzzer(
        args.num_tests,
        seed=args.seed,
        verbose=args.verbose,
        save_failures=args.save_failures,
        recovery="strict" if args.strict else "lenient",
    )

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
