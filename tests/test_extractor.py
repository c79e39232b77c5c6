"""Tests for entity extraction from PlantUML source."""

import logging

import pytest

from layout_sync import Entity, extract_entities, parse_declaration
from layout_sync.extractor import has_link_token, is_candidate_declaration


class TestDeclarationForms:
    def test_label_as_id(self) -> None:
        assert parse_declaration('participant "Web Server" as WS') == Entity("WS", "Web Server", "participant")

    def test_id_as_label(self) -> None:
        assert parse_declaration('actor User as "End User"') == Entity("User", "End User", "actor")

    def test_bare_id(self) -> None:
        assert parse_declaration("component Billing") == Entity("Billing", "Billing", "component")

    def test_keyword_is_case_insensitive(self) -> None:
        assert parse_declaration("  Class Order") == Entity("Order", "Order", "class")

    def test_all_kinds(self) -> None:
        for kind in ["class", "actor", "participant", "usecase", "component", "interface", "object"]:
            assert parse_declaration(f"{kind} X").kind == kind

    def test_label_resembling_identifier_uses_first_form(self) -> None:
        # Quoted label looks like an identifier and contains a keyword; still form 1
        entity = parse_declaration('class "class Foo" as Bar')
        assert entity == Entity("Bar", "class Foo", "class")

    def test_trailing_decoration_is_tolerated(self) -> None:
        assert parse_declaration("class Order <<Entity>> #lightblue {").id == "Order"
        assert parse_declaration('participant "Queue" as Q #red').id == "Q"

    def test_unquoted_alias_keeps_first_identifier(self) -> None:
        assert parse_declaration("participant Foo as F") == Entity("Foo", "Foo", "participant")

    @pytest.mark.parametrize("line", [
        'class "Only a label"',
        "class Foo-Bar",
        "class",
        "classroom A",
        "A --> B",
    ])
    def test_not_a_declaration(self, line: str) -> None:
        assert parse_declaration(line) is None


class TestCandidateLines:
    @pytest.mark.parametrize("line", [
        "class A --> class B",
        "A -[hidden]right-> B",
        "class A -[hidden]down-> B",
        "class A <|-- B",
        "class A .. B",
    ])
    def test_link_lines_are_not_candidates(self, line: str) -> None:
        assert not is_candidate_declaration(line)

    def test_tokens_inside_quotes_are_ignored(self) -> None:
        assert not has_link_token('class "a -> b" as AB')
        assert parse_declaration('class "a -> b" as AB') == Entity("AB", "a -> b", "class")


class TestExtractEntities:
    def test_first_seen_order(self, class_doc: str) -> None:
        assert [e.id for e in extract_entities(class_doc)] == ["A", "B", "C"]

    def test_first_declaration_wins(self) -> None:
        text = 'class A as "First"\nclass A as "Second"\nclass B\n'
        entities = extract_entities(text)
        assert entities == [Entity("A", "First", "class"), Entity("B", "B", "class")]

    def test_malformed_line_does_not_stop_scan(self, caplog) -> None:
        text = 'class A\nclass "broken"\nclass B\n'
        with caplog.at_level(logging.DEBUG, logger="layout_sync.extractor"):
            entities = extract_entities(text)
        assert [e.id for e in entities] == ["A", "B"]
        assert "line 2" in caplog.text

    def test_comments_are_skipped(self) -> None:
        text = "\n".join([
            "@startuml",
            "' class Commented",
            "/' block comment",
            "class InBlock",
            "'/",
            "/' one-line block '/",
            "class Real",
            "@enduml",
        ])
        assert [e.id for e in extract_entities(text)] == ["Real"]

    def test_generated_hidden_links_are_ignored(self) -> None:
        text = "class A\nclass B\n' @layout-constraints begin\nA -[hidden]right-> B\n' @layout-constraints end\n"
        assert [e.id for e in extract_entities(text)] == ["A", "B"]

    def test_empty_text(self) -> None:
        assert extract_entities("") == []

    def test_round_trip_of_well_formed_declarations(self) -> None:
        expected = [
            Entity("U", "User", "actor"),
            Entity("WS", "Web Server", "participant"),
            Entity("DB", "DB", "component"),
            Entity("Login", "Log in", "usecase"),
            Entity("IRepo", "IRepo", "interface"),
            Entity("cfg", "Settings", "object"),
        ]
        lines = [
            'actor "User" as U',
            'participant "Web Server" as WS',
            "component DB",
            'usecase Login as "Log in"',
            "interface IRepo",
            'object cfg as "Settings"',
        ]
        assert extract_entities("\n".join(lines)) == expected
