"""Tests for globals_guard/tokens/tokenizer.py - tree-sitter backed lexing."""

from globals_guard.tokens import EMPTY_TOKENS, PHPTokenizer, TokenKind

K = TokenKind


def meaningful_kinds(stream):
    return [token.kind for token in stream if token.kind not in EMPTY_TOKENS]


class TestLexing:
    """Tests for token kinds and texts."""

    def test_simple_assignment(self, tokenize):
        stream = tokenize("$GLOBALS['wpdb'] = 1;")

        assert meaningful_kinds(stream) == [
            K.OPEN_TAG,
            K.VARIABLE,
            K.OPEN_SQUARE_BRACKET,
            K.CONSTANT_ENCAPSED_STRING,
            K.CLOSE_SQUARE_BRACKET,
            K.ASSIGNMENT,
            K.NUMBER,
            K.SEMICOLON,
        ]

    def test_texts_cover_source(self, tokenize):
        code = "<?php\nfunction f( $a ) {\n\tglobal $wpdb; // note\n\treturn $a . 'x';\n}\n"
        stream = tokenize(code)

        assert "".join(token.text for token in stream) == code
        assert stream.source == code

    def test_broken_source_still_tokenizes(self, tokenize):
        """Test syntax errors are tolerated and no text is lost."""
        code = "<?php\nfunction ( {{ $GLOBALS['wpdb'] = ;\n)) class 1 ?>tail"
        stream = tokenize(code)

        assert "".join(token.text for token in stream) == code
        assert any("GLOBALS" in token.text for token in stream)

    def test_variable_is_single_token(self, tokenize, find_token):
        stream = tokenize("$wpdb->query();")
        assert stream[find_token(stream, K.VARIABLE)].text == "$wpdb"

    def test_operators(self, tokenize):
        stream = tokenize("$a .= 1; $b == 2; $c = array( 'k' => 3 ); $d->e; F::$g;")
        kinds = meaningful_kinds(stream)

        assert kinds.count(K.ASSIGNMENT) == 2
        assert K.DOUBLE_ARROW in kinds
        assert K.OBJECT_OPERATOR in kinds
        assert K.DOUBLE_COLON in kinds
        assert K.ARRAY in kinds
        assert K.OPERATOR in kinds

    def test_keywords(self, tokenize):
        stream = tokenize("global $a; foreach ( $b as $c ) {} namespace Foo;")
        kinds = meaningful_kinds(stream)

        for kind in (K.GLOBAL, K.FOREACH, K.AS, K.NAMESPACE):
            assert kind in kinds

    def test_strings(self, tokenize, find_token):
        stream = tokenize("$a = 'one'; $b = \"two\"; $c = \"three $a\";")

        assert stream[find_token(stream, K.CONSTANT_ENCAPSED_STRING)].text == "'one'"
        assert stream[find_token(stream, K.CONSTANT_ENCAPSED_STRING, nth=1)].text == '"two"'
        assert stream[find_token(stream, K.DOUBLE_QUOTED_STRING)].text == '"three $a"'

    def test_heredoc(self, tokenize):
        stream = tokenize("$a = <<<EOT\nhello $b\nEOT;\n")
        assert K.HEREDOC in meaningful_kinds(stream)

    def test_comments(self, tokenize, find_token):
        stream = tokenize("// line\n/** doc */\n# hash\n$a = 1; /* block */")

        assert stream[find_token(stream, K.COMMENT)].text.strip() == "// line"
        assert stream[find_token(stream, K.DOC_COMMENT)].text == "/** doc */"
        assert stream[find_token(stream, K.COMMENT, nth=2)].text == "/* block */"
        assert all(stream[i].is_empty for i in range(len(stream)) if stream[i].kind is K.COMMENT)

    def test_line_numbers(self, tokenize, find_token):
        stream = tokenize("$a = 1;\n\n$b = 2;")

        assert stream[find_token(stream, K.OPEN_TAG)].line == 1
        assert stream[find_token(stream, K.VARIABLE, "$a")].line == 2
        assert stream[find_token(stream, K.VARIABLE, "$b")].line == 4

    def test_inline_html(self, tokenizer):
        stream = tokenizer.tokenize("<p><?php echo 1; ?></p>\n")
        kinds = meaningful_kinds(stream)

        assert kinds[0] is K.INLINE_HTML
        assert K.OPEN_TAG in kinds
        assert K.CLOSE_TAG in kinds

    def test_tokenize_file(self, tokenizer, temp_dir):
        path = temp_dir / "file.php"
        path.write_text("<?php\nglobal $wpdb;\n")

        stream = tokenizer.tokenize_file(path)

        assert K.GLOBAL in meaningful_kinds(stream)

    def test_parser_is_reused(self):
        tokenizer = PHPTokenizer()
        assert tokenizer.get_parser() is tokenizer.get_parser()


class TestReclassification:
    """Tests for keywords whose kind depends on their neighbours."""

    def test_named_function(self, tokenize):
        kinds = meaningful_kinds(tokenize("function foo() {}"))
        assert K.FUNCTION in kinds
        assert K.CLOSURE not in kinds

    def test_closure(self, tokenize):
        kinds = meaningful_kinds(tokenize("$f = function () use ( $x ) { return $x; };"))
        assert K.CLOSURE in kinds
        assert K.FUNCTION not in kinds

    def test_by_reference_closure(self, tokenize):
        kinds = meaningful_kinds(tokenize("$f = function &() { static $a; return $a; };"))
        assert K.CLOSURE in kinds

    def test_anonymous_class(self, tokenize):
        kinds = meaningful_kinds(tokenize("$o = new class {};"))
        assert K.ANON_CLASS in kinds
        assert K.CLASS not in kinds

    def test_class_name_resolution(self, tokenize):
        """Test `Foo::class` does not open a class scope."""
        stream = tokenize("$n = Foo::class; if ( $x ) { $y = 1; }")

        assert K.CLASS not in meaningful_kinds(stream)
        assert all(token.scope_condition is None for token in stream)


class TestStructure:
    """Tests for scope and parenthesis information on real code."""

    def test_class_and_method_scopes(self, tokenize, find_token):
        stream = tokenize("class Foo {\n\tpublic function bar() {\n\t\treturn 1;\n\t}\n}\n")
        class_ptr = find_token(stream, K.CLASS)
        function_ptr = find_token(stream, K.FUNCTION)
        number_ptr = find_token(stream, K.NUMBER)

        assert stream[class_ptr].scope_closer == find_token(stream, K.CLOSE_CURLY_BRACKET, nth=1)
        assert stream[function_ptr].scope_closer == find_token(stream, K.CLOSE_CURLY_BRACKET)
        assert stream[function_ptr].conditions == (class_ptr,)
        assert stream[number_ptr].conditions == (class_ptr, function_ptr)

    def test_foreach_parenthesis_owner(self, tokenize, find_token):
        stream = tokenize("foreach ( $items as $item ) {}")
        foreach_ptr = find_token(stream, K.FOREACH)
        opener = find_token(stream, K.OPEN_PARENTHESIS)

        assert stream[opener].parenthesis_owner == foreach_ptr
        item = stream[find_token(stream, K.VARIABLE, "$item")]
        assert item.nested_parenthesis == ((opener, stream[opener].bracket_closer),)

    def test_unterminated_function(self, tokenize, find_token):
        stream = tokenize("function f() {\n\t$a = 1;\n")
        function_ptr = find_token(stream, K.FUNCTION)

        assert stream[function_ptr].scope_opener is not None
        assert stream[function_ptr].scope_closer is None
        assert function_ptr in stream[find_token(stream, K.VARIABLE, "$a")].conditions
