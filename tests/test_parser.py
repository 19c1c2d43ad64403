import unittest

from shuttle import Element, ErrorKind, Property, PropertyKind, Text, parse
from shuttle.parser import Parser, ParserOpts


def kinds(errors):
    return [error.kind for error in errors]


def parse_one(source):
    document, errors = parse(source)
    assert len(document) == 1, document
    return document[0], errors


class TestPropertyDisambiguation(unittest.TestCase):
    def test_leading_name_equals_token_is_property(self):
        element, errors = parse_one("(p x=5 is the solution)")
        assert errors == []
        assert element == Element("p", [Property("x", "5")], [Text("is the solution")])

    def test_escaped_equals_forces_text(self):
        element, errors = parse_one("(p x&equals;5 is the solution)")
        assert errors == []
        assert element.properties == ()
        assert element.content == (Text("x=5 is the solution"),)

    def test_property_like_token_after_text_is_text(self):
        element, errors = parse_one("(p Hello x=5)")
        assert errors == []
        assert element.properties == ()
        assert element.content == (Text("Hello x=5"),)

    def test_property_like_token_after_child_is_text(self):
        element, _ = parse_one("(p (b bold) y=1)")
        assert element.properties == ()
        assert element.content == (Element("b", content=[Text("bold")]), Text("y=1"))

    def test_several_properties_before_content(self):
        element, _ = parse_one("(a href=/home id=top rel=nofollow Home)")
        assert [p.name for p in element.properties] == ["href", "id", "rel"]
        assert element.content == (Text("Home"),)

    def test_comment_does_not_end_property_mode(self):
        element, _ = parse_one("(p (! note !) x=1 text)")
        assert element.properties == (Property("x", "1"),)
        assert element.content == (Text("text"),)

    def test_empty_child_does_not_end_property_mode(self):
        element, errors = parse_one("(p () x=1)")
        assert kinds(errors) == [ErrorKind.EMPTY_ELEMENT]
        assert element.properties == (Property("x", "1"),)

    def test_property_names_allow_name_punctuation(self):
        element, _ = parse_one("(svg xml:lang=en data-x.y=1 _z=2)")
        assert [p.name for p in element.properties] == ["xml:lang", "data-x.y", "_z"]

    def test_leading_non_name_text_with_equals_is_text(self):
        element, errors = parse_one("(p 2+2=4)")
        assert errors == []
        assert element.content == (Text("2+2=4"),)

    def test_leading_equals_is_text(self):
        element, errors = parse_one("(p =5)")
        assert errors == []
        assert element.content == (Text("=5"),)

    def test_invalid_property_name_becomes_text(self):
        element, errors = parse_one("(p data@x=1 rest)")
        assert kinds(errors) == [ErrorKind.INVALID_PROPERTY_NAME]
        assert errors[0].offset == 3
        assert element.properties == ()
        assert element.content == (Text("data@x=1 rest"),)


class TestPropertyForms(unittest.TestCase):
    def test_unquoted_value(self):
        element, _ = parse_one("(a href=/x?a=1&b=2 go)")
        prop = element.get("href")
        assert prop.kind is PropertyKind.VALUE
        # No entity decoding in unquoted values
        assert prop.value == "/x?a=1&b=2"
        assert element.content == (Text("go"),)

    def test_quoted_value_keeps_whitespace_and_parens(self):
        element, errors = parse_one('(a title="a (b) &amp; c" link)')
        assert errors == []
        assert element.get("title").value == "a (b) & c"
        assert element.content == (Text("link"),)

    def test_boolean_before_whitespace_and_close(self):
        element, _ = parse_one("(input type=checkbox checked= disabled=)")
        assert [p.kind for p in element.properties] == [
            PropertyKind.VALUE,
            PropertyKind.BOOLEAN,
            PropertyKind.BOOLEAN,
        ]
        assert element.get("checked").value is None

    def test_boolean_before_child_element(self):
        element, _ = parse_one("(details open=(summary More))")
        assert element.get("open").kind is PropertyKind.BOOLEAN
        assert element.content == (Element("summary", content=[Text("More")]),)

    def test_empty_string_value(self):
        element, _ = parse_one('(input value="")')
        prop = element.get("value")
        assert prop.kind is PropertyKind.EMPTY_STRING
        assert prop.value == ""

    def test_duplicate_property_first_wins(self):
        element, errors = parse_one("(a href=/ href=/other)")
        assert kinds(errors) == [ErrorKind.DUPLICATE_PROPERTY]
        assert element.properties == (Property("href", "/"),)

    def test_unterminated_quote_closes_at_paren(self):
        document, errors = parse('(a title="oops) more')
        assert kinds(errors) == [ErrorKind.UNTERMINATED_QUOTED_VALUE]
        assert list(document) == [Element("a", [Property("title", "oops")]), Text("more")]

    def test_unterminated_quote_closes_at_end(self):
        element, errors = parse_one('(a title="never')
        assert kinds(errors) == [ErrorKind.UNTERMINATED_QUOTED_VALUE, ErrorKind.UNMATCHED_PARENTHESIS]
        assert element.get("title").value == "never"

    def test_invalid_entity_in_quoted_value(self):
        element, errors = parse_one('(a title="x &nope; y")')
        assert kinds(errors) == [ErrorKind.INVALID_ENTITY_REFERENCE]
        assert errors[0].offset == 12
        assert element.get("title").value == "x &nope; y"


class TestText(unittest.TestCase):
    def test_entities_resolved_in_text(self):
        element, errors = parse_one("(p &#65;&#x41;&amp;&lt;)")
        assert errors == []
        assert element.content == (Text("AA&<"),)

    def test_whitespace_inside_text_preserved(self):
        element, _ = parse_one("(pre a  b\n\tc)")
        assert element.content == (Text("a  b\n\tc"),)

    def test_whitespace_before_text_skipped_after_preserved(self):
        element, _ = parse_one("(p   Hello (b world)   again )")
        assert element.content == (
            Text("Hello "),
            Element("b", content=[Text("world")]),
            Text("again "),
        )

    def test_whitespace_between_elements_dropped(self):
        element, _ = parse_one("(ul\n  (li a)\n  (li b)\n)")
        assert element.content == (
            Element("li", content=[Text("a")]),
            Element("li", content=[Text("b")]),
        )

    def test_text_runs_around_comment_merge(self):
        element, _ = parse_one("(p a (! c !) b)")
        assert element.content == (Text("a b"),)

    def test_invalid_entity_kept_literally(self):
        element, errors = parse_one("(p fish & chips &bogus;)")
        assert kinds(errors) == [ErrorKind.INVALID_ENTITY_REFERENCE, ErrorKind.INVALID_ENTITY_REFERENCE]
        assert element.content == (Text("fish & chips &bogus;"),)

    def test_top_level_text(self):
        document, errors = parse("hello (b x) bye")
        assert errors == []
        assert list(document) == [Text("hello "), Element("b", content=[Text("x")]), Text("bye")]

    def test_empty_input(self):
        document, errors = parse("")
        assert len(document) == 0
        assert errors == []

    def test_whitespace_only_input(self):
        document, errors = parse(" \n\t\r ")
        assert len(document) == 0
        assert errors == []

    def test_form_feed_is_not_whitespace(self):
        element, _ = parse_one("(p \x0cx)")
        assert element.content == (Text("\x0cx"),)


class TestComments(unittest.TestCase):
    def test_comment_contributes_nothing(self):
        document, errors = parse("(! header !)(p x)(! footer !)")
        assert errors == []
        assert list(document) == [Element("p", content=[Text("x")])]

    def test_comment_between_paren_and_name(self):
        element, errors = parse_one("( (! c !) p x)")
        assert errors == []
        assert element == Element("p", content=[Text("x")])

    def test_comments_do_not_nest(self):
        document, errors = parse("(! a (! b !) c !)")
        assert list(document) == [Text("c !")]
        assert kinds(errors) == [ErrorKind.UNMATCHED_PARENTHESIS]
        assert errors[0].offset == 16

    def test_unterminated_comment_runs_to_end(self):
        document, errors = parse("(p x) (! never (p closed)")
        assert kinds(errors) == [ErrorKind.UNTERMINATED_COMMENT]
        assert errors[0].offset == 6
        assert list(document) == [Element("p", content=[Text("x")])]

    def test_unterminated_comment_inside_element(self):
        element, errors = parse_one("(p x (! open")
        assert kinds(errors) == [ErrorKind.UNTERMINATED_COMMENT, ErrorKind.UNMATCHED_PARENTHESIS]
        assert element.content == (Text("x "),)


class TestStructure(unittest.TestCase):
    def test_nested_elements(self):
        element, errors = parse_one("(div class=container (h1 Welcome) (p This is Shuttle.))")
        assert errors == []
        assert element == Element(
            "div",
            [Property("class", "container")],
            [
                Element("h1", content=[Text("Welcome")]),
                Element("p", content=[Text("This is Shuttle.")]),
            ],
        )

    def test_name_directly_followed_by_child(self):
        element, _ = parse_one("(p(b x))")
        assert element.content == (Element("b", content=[Text("x")]),)

    def test_forest_of_top_level_nodes(self):
        document, _ = parse("(h1 A)\n(p B)\n(hr)")
        assert [node.name for node in document] == ["h1", "p", "hr"]

    def test_content_in_void_element_dropped(self):
        element, errors = parse_one("(br (p x))")
        assert kinds(errors) == [ErrorKind.CONTENT_IN_VOID_ELEMENT]
        assert errors[0].offset == 4
        assert element == Element("br")

    def test_void_element_with_properties(self):
        element, errors = parse_one("(img src=a.png alt=\"A picture\")")
        assert errors == []
        assert element.is_void
        assert element.get("alt").value == "A picture"

    def test_empty_element_skipped(self):
        document, errors = parse("(p a) () (p b)")
        assert kinds(errors) == [ErrorKind.EMPTY_ELEMENT]
        assert [node.text() for node in document] == ["a", "b"]

    def test_invalid_tag_name_unwraps_content(self):
        element, errors = parse_one("(div (1x k=v a (b c)) d)")
        assert kinds(errors) == [ErrorKind.INVALID_TAG_NAME]
        assert errors[0].offset == 6
        assert element.content == (Text("a "), Element("b", content=[Text("c")]), Text("d"))

    def test_empty_name_with_content_unwraps(self):
        element, errors = parse_one("(p ( (b y)))")
        assert kinds(errors) == [ErrorKind.EMPTY_ELEMENT]
        assert element.content == (Element("b", content=[Text("y")]),)

    def test_whitespace_before_name_allowed(self):
        element, errors = parse_one("(p ( x))")
        assert errors == []
        assert element.content == (Element("x"),)

    def test_unmatched_open_folds_rest_into_element(self):
        document, errors = parse("(div (p text (b more")
        assert len(errors) == 3
        assert document.to_html() == "<div><p>text <b>more</b></p></div>"

    def test_unmatched_close_skipped(self):
        document, errors = parse("(p a)) (p b)")
        assert kinds(errors) == [ErrorKind.UNMATCHED_PARENTHESIS]
        assert errors[0].column == 6
        assert len(document) == 2


class TestNestingLimit(unittest.TestCase):
    def test_too_deep_element_skipped(self):
        document, errors = parse("(a (a (a (a (a x)))) y)", max_depth=3)
        assert kinds(errors) == [ErrorKind.NESTING_TOO_DEEP]
        assert errors[0].offset == 9
        assert document.to_html() == "<a><a><a></a></a>y</a>"

    def test_default_limit_stops_pathological_input(self):
        source = "(div " * 2000 + ")" * 2000
        document, errors = parse(source)
        assert kinds(errors) == [ErrorKind.NESTING_TOO_DEEP]
        assert len(document) == 1

    def test_skipped_span_ignores_parens_in_quoted_values(self):
        document, errors = parse('(div (a title=")" x) y)', max_depth=1)
        assert kinds(errors) == [ErrorKind.NESTING_TOO_DEEP]
        assert document.to_html() == "<div>y</div>"

    def test_max_depth_must_be_positive(self):
        with self.assertRaises(ValueError):
            ParserOpts(max_depth=0)


class TestParserObject(unittest.TestCase):
    def test_parser_run_returns_named_result(self):
        result = Parser("(p x)", ParserOpts(recovery="lenient")).run()
        assert result.errors == []
        assert result.document[0] == Element("p", content=[Text("x")])

    def test_debug_trace_written_to_stderr(self):
        import contextlib
        import io

        buffer = io.StringIO()
        with contextlib.redirect_stderr(buffer):
            parse("(p (b x))", debug=True)
        trace = buffer.getvalue()
        assert "open (p" in trace
        assert "close (b" in trace

    def test_determinism(self):
        source = "(div a=1 b=\"2\" c= (p x &amp; y) (br) (! c !) tail))"
        first = [parse(source).document.to_html() for _ in range(3)]
        assert first[0] == first[1] == first[2]


if __name__ == "__main__":
    unittest.main()
