"""Tests for the Go syntax layer."""

from pathlib import Path

from ctxpatch.syntax import GoParser, Parameter, name_pattern, parse_parameters


class TestSourceFile:
    """Tests for file-level queries."""

    def test_package_name(self, parser: GoParser, app_dir: Path):
        """Should read the package clause."""
        source = parser.parse(app_dir / "store" / "store.go")
        assert source.package_name == "store"
        assert not source.has_error

    def test_imports_keep_quotes(self, parser: GoParser, handler_file: Path):
        """Import paths are reported as written, quotes included."""
        source = parser.parse(handler_file)

        paths = [spec.path for spec in source.imports()]
        assert paths == ['"context"', '"example.com/app/store"']
        assert all(spec.alias is None for spec in source.imports())

    def test_import_alias(self, parser: GoParser):
        """Should record import aliases."""
        source = parser.parse_bytes(
            Path("x.go"), b'package x\n\nimport s "example.com/app/store"\n'
        )

        [spec] = source.imports()
        assert spec.alias == "s"
        assert spec.line == 3

    def test_functions_in_source_order(self, parser: GoParser, handler_file: Path):
        """Should list functions and methods in declaration order."""
        source = parser.parse(handler_file)

        names = [decl.name for decl in source.functions()]
        assert names == ["Handle", "Legacy", "Plain", "Twice", "Plain"]

    def test_syntax_errors_flagged(self, parser: GoParser):
        """A broken file is flagged instead of raising."""
        source = parser.parse_bytes(Path("broken.go"), b"package x\n\nfunc (\n")
        assert source.has_error


class TestFunctionDecl:
    """Tests for declaration details."""

    def test_method_receiver(self, parser: GoParser, app_dir: Path):
        """Should split a method receiver into name and type."""
        source = parser.parse(app_dir / "store" / "store.go")
        [fetch] = source.functions()

        assert fetch.receiver_name == "s"
        assert fetch.receiver_type == "*Svc"
        assert fetch.parameters == [Parameter("id", "string")]
        assert fetch.result == "(string, error)"

    def test_signature_excludes_body(self, parser: GoParser, app_dir: Path):
        """The signature ends before the opening brace of the body."""
        source = parser.parse(app_dir / "store" / "store.go")
        [fetch] = source.functions()

        assert fetch.signature() == "func (s *Svc) Fetch(id string) (string, error)"

    def test_type_parameters(self, parser: GoParser, app_dir: Path):
        """Should keep the type parameter list and its names."""
        source = parser.parse(app_dir / "util" / "util.go")
        decl = next(d for d in source.functions() if d.name == "Map")

        assert decl.type_parameters == "[T any, U any]"
        assert decl.type_parameter_names == ["T", "U"]

    def test_calls_in_source_order(self, parser: GoParser, app_dir: Path):
        """Should collect every call expression of the body."""
        source = parser.parse(app_dir / "store" / "store.go")
        [fetch] = source.functions()

        calls = fetch.calls()
        assert [c.callee for c in calls] == ["db.Query", "row.String"]
        assert [c.callee_kind for c in calls] == ["selector", "selector"]
        assert calls[0].arguments == ["s.conn", "id"]
        assert calls[0].render() == "db.Query(s.conn, id)"

    def test_identifier_call_kind(self, parser: GoParser, handler_file: Path):
        """A bare function call is classified as an identifier call."""
        source = parser.parse(handler_file)
        handle = source.functions()[0]

        kinds = {c.callee: c.callee_kind for c in handle.calls()}
        assert kinds == {"len": "identifier", "svc.Fetch": "selector"}

    def test_mentions(self, parser: GoParser, handler_file: Path):
        """Should find identifiers anywhere in the declaration."""
        source = parser.parse(handler_file)
        handle, legacy = source.functions()[:2]

        assert handle.mentions("ctx")
        assert not legacy.mentions("ctx")


class TestParameters:
    """Tests for parameter list flattening."""

    def test_grouped_and_variadic(self, parser: GoParser):
        """Grouped names are split and the variadic marker kept apart."""
        source = parser.parse_bytes(
            Path("x.go"), b"package x\n\nfunc F(a, b int, rest ...string) {}\n"
        )
        [decl] = source.functions()

        assert decl.parameters == [
            Parameter("a", "int"),
            Parameter("b", "int"),
            Parameter("rest", "string", variadic=True),
        ]
        assert decl.parameters[2].render() == "rest ...string"

    def test_unnamed_parameters(self, parser: GoParser, app_dir: Path):
        """Unnamed parameters have no name but remember where they start."""
        source = parser.parse(app_dir / "util" / "util.go")
        decl = next(d for d in source.functions() if d.name == "Touch")

        assert decl.parameters == [Parameter(None, "int"), Parameter(None, "string")]
        assert all(p.start is not None for p in decl.parameters)

    def test_no_parameter_list(self):
        """A missing node flattens to nothing."""
        assert parse_parameters(None) == []


class TestEdits:
    """Tests for insertion edits and rendering."""

    def test_render_applies_edits(self, parser: GoParser):
        """Edits inside the range are applied in offset order."""
        data = b"package x\n\nfunc F(a int) {}\n"
        source = parser.parse_bytes(Path("x.go"), data)
        [decl] = source.functions()

        source.add_edit(decl.params_start, "ctx context.Context, ")
        source.add_edit(decl.name_end, "WithCtx")

        assert decl.render() == "func FWithCtx(ctx context.Context, a int) {}"
        assert source.data == data

    def test_add_edit_is_idempotent(self, parser: GoParser):
        """The same insertion is recorded only once."""
        source = parser.parse_bytes(Path("x.go"), b"package x\n\nfunc F() {}\n")
        [decl] = source.functions()

        assert source.add_edit(decl.name_end, "WithCtx")
        assert not source.add_edit(decl.name_end, "WithCtx")
        assert len(source.edits) == 1
        assert decl.render() == "func FWithCtx() {}"

    def test_edits_outside_range_ignored(self, parser: GoParser):
        """Rendering a range leaves edits elsewhere out."""
        source = parser.parse_bytes(
            Path("x.go"), b"package x\n\nfunc F() {}\n\nfunc G() {}\n"
        )
        f, g = source.functions()

        source.add_edit(f.name_end, "WithCtx")

        assert g.render() == "func G() {}"


class TestNamePattern:
    """Tests for textual name matching."""

    def test_matches_qualified_call(self):
        """Should match the name right before an opening parenthesis."""
        assert name_pattern("Fetch").search("svc.Fetch(id)")
        assert name_pattern("Fetch").search("Fetch (id)")

    def test_requires_whole_name(self):
        """Longer names sharing a prefix or suffix do not match."""
        assert not name_pattern("Fetch").search("svc.PreFetch(id)")
        assert not name_pattern("Fetch").search("svc.Fetcher(id)")
