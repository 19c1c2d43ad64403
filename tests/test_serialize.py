import unittest

from shuttle import Document, Element, Property, PropertyKind, Text, parse, serialize, to_html


def render(source):
    document, _ = parse(source)
    return serialize(document)


class TestSerializeFromSource(unittest.TestCase):
    def test_structural_round_trip(self):
        assert (
            render("(div class=container (h1 Welcome) (p This is Shuttle.))")
            == '<div class="container"><h1>Welcome</h1><p>This is Shuttle.</p></div>'
        )

    def test_disambiguation_output(self):
        assert render("(p x=5 is the solution)") == '<p x="5">is the solution</p>'
        assert render("(p x&equals;5 is the solution)") == "<p>x=5 is the solution</p>"

    def test_boolean_and_empty_string_differ(self):
        assert render("(input type=checkbox checked=)") == '<input type="checkbox" checked>'
        assert render('(input value="")') == '<input value="">'
        assert render("(input value=)") == "<input value>"

    def test_void_element_never_emits_content(self):
        assert render("(br (p x))") == "<br>"
        assert render("(hr)(img src=a.png)") == '<hr><img src="a.png">'

    def test_entity_reencoded(self):
        assert render("(p &amp;)") == "<p>&amp;</p>"
        assert render("(p &#65;&#x41;)") == "<p>AA</p>"
        assert render("(p &lt;b&gt;)") == "<p>&lt;b&gt;</p>"

    def test_non_reserved_entities_emitted_as_characters(self):
        assert render("(p a&nbsp;b &copy;)") == "<p>a\u00a0b \u00a9</p>"

    def test_values_always_double_quoted(self):
        assert render("(a href=/x)") == '<a href="/x"></a>'
        assert render('(a title="say &quot;hi&quot;")') == '<a title="say &quot;hi&quot;"></a>'

    def test_property_order_preserved(self):
        assert render("(a z=1 a=2 m=3 x)") == '<a z="1" a="2" m="3">x</a>'

    def test_text_whitespace_verbatim(self):
        assert render("(pre  line one\n  line two)") == "<pre>line one\n  line two</pre>"

    def test_top_level_text(self):
        assert render("a < b (b c)") == "a &lt; b <b>c</b>"

    def test_empty_document(self):
        assert render("") == ""


class TestSerializeTree(unittest.TestCase):
    def test_text_escaping(self):
        assert to_html(Text('a<b>&c "q"')) == 'a&lt;b&gt;&amp;c "q"'

    def test_attribute_escaping(self):
        element = Element("a", [Property("title", 'say "hi" & <go>')])
        assert to_html(element) == '<a title="say &quot;hi&quot; &amp; &lt;go&gt;"></a>'

    def test_empty_non_void_element(self):
        assert to_html(Element("p")) == "<p></p>"

    def test_explicit_kinds(self):
        element = Element(
            "input",
            [
                Property("checked", kind=PropertyKind.BOOLEAN),
                Property("value", "", kind=PropertyKind.EMPTY_STRING),
                Property("name", "", kind=PropertyKind.VALUE),
            ],
        )
        assert to_html(element) == '<input checked value="" name="">'

    def test_document_serialization(self):
        document = Document([Element("h1", content=[Text("T")]), Text("\n"), Element("hr")])
        assert serialize(document) == "<h1>T</h1>\n<hr>"
        assert document.to_html() == serialize(document)

    def test_node_to_html_delegates(self):
        element = Element("em", content=[Text("x")])
        assert element.to_html() == "<em>x</em>"
        assert Text("&").to_html() == "&amp;"

    def test_malformed_tree_rejected(self):
        with self.assertRaises(TypeError):
            serialize([Element("p"), "not a node"])

    def test_serialize_is_deterministic(self):
        document, _ = parse("(ul (li a=1 b=2 one) (li two) (li three))")
        outputs = {serialize(document) for _ in range(5)}
        assert len(outputs) == 1


if __name__ == "__main__":
    unittest.main()
