"""
Tests for the messaging command grammar and reply formats.
"""

import pytest

from civic.messaging.commands import (
    INVALID_SIGN_FORMAT_REPLY,
    ListPetitionsCommand,
    SignPetitionCommand,
    format_petition_list,
    parse_command,
    parse_list_command,
    parse_sign_command,
    sign_error_reply,
    sign_success_reply,
)
from civic.petitions.interface import PetitionSummary


class TestListCommand:
    @pytest.mark.parametrize("text", ["PETITIONS", "petitions", "  Petitions  ", "list petitions", "LIST PETITIONS"])
    def test_synonyms_match(self, text: str) -> None:
        assert parse_list_command(text) == ListPetitionsCommand()

    @pytest.mark.parametrize("text", ["petition", "show petitions", "PETITIONS please", ""])
    def test_other_text_does_not_match(self, text: str) -> None:
        assert parse_list_command(text) is None


class TestSignCommand:
    def test_parses_fields(self) -> None:
        cmd = parse_sign_command("SIGN|abc123|Jane Doe|jane@example.com")

        assert cmd == SignPetitionCommand(
            petition_id="abc123",
            full_name="Jane Doe",
            email="jane@example.com",
            anonymous=False,
        )
        assert cmd.is_valid()

    def test_anonymous_flag(self) -> None:
        cmd = parse_sign_command("SIGN|abc123|Jane Doe|jane@example.com|anon")
        assert cmd is not None and cmd.anonymous is True

    @pytest.mark.parametrize("flag", ["true", "YES", "y", "1", "Anonymous"])
    def test_truthy_anonymous_values(self, flag: str) -> None:
        assert parse_sign_command(f"SIGN|p|Jane|j@x.org|{flag}").anonymous is True

    @pytest.mark.parametrize("flag", ["no", "0", "", "public"])
    def test_other_anonymous_values(self, flag: str) -> None:
        assert parse_sign_command(f"SIGN|p|Jane|j@x.org|{flag}").anonymous is False

    def test_fields_trimmed_and_keyword_case_insensitive(self) -> None:
        cmd = parse_sign_command("  sign | abc | Jane Doe | Jane@Example.com ")
        assert cmd == SignPetitionCommand("abc", "Jane Doe", "Jane@Example.com")

    def test_three_fields_do_not_parse(self) -> None:
        assert parse_sign_command("SIGN|abc123|Jane") is None
        assert parse_command("SIGN|abc123|Jane") is None

    def test_other_keyword_does_not_parse(self) -> None:
        assert parse_sign_command("SIGNUP|a|b|c@d") is None

    @pytest.mark.parametrize(
        "text",
        [
            "SIGN||Jane|jane@example.com",
            "SIGN|abc||jane@example.com",
            "SIGN|abc|Jane|",
            "SIGN|abc|Jane|not-an-email",
        ],
    )
    def test_invalid_fields_parse_but_are_invalid(self, text: str) -> None:
        cmd = parse_sign_command(text)
        assert cmd is not None
        assert not cmd.is_valid()


class TestParseCommand:
    def test_list_takes_priority(self) -> None:
        assert isinstance(parse_command("petitions"), ListPetitionsCommand)

    def test_sign(self) -> None:
        assert isinstance(parse_command("SIGN|a|b|c@d.e"), SignPetitionCommand)

    def test_free_form(self) -> None:
        assert parse_command("How do I join?") is None


class TestReplies:
    def test_petition_list_format(self) -> None:
        reply = format_petition_list(
            [PetitionSummary("p1", "Fix the roads"), PetitionSummary("p2", "Clean water")]
        )

        assert reply == (
            "Active petitions:\n\n"
            "1. Fix the roads\nID: p1\n\n"
            "2. Clean water\nID: p2\n\n"
            "To sign, send:\n"
            "SIGN|petitionId|Your Full Name|your@email.com|anonymous(optional)"
        )

    def test_petition_list_capped(self) -> None:
        petitions = [PetitionSummary(f"p{i}", f"Petition {i}") for i in range(1, 12)]

        reply = format_petition_list(petitions, limit=8)

        assert "8. Petition 8" in reply
        assert "9. Petition 9" not in reply

    def test_sign_success(self) -> None:
        assert sign_success_reply("Jane Doe") == (
            "Thank you, Jane Doe. Your petition signature has been recorded successfully."
        )

    def test_sign_error(self) -> None:
        assert sign_error_reply("Petition not found") == (
            "Could not sign petition: Petition not found\n\n"
            "Tip: send PETITIONS to get valid petition IDs."
        )

    def test_invalid_format(self) -> None:
        assert INVALID_SIGN_FORMAT_REPLY == (
            "Invalid sign format.\n\nUse:\n"
            "SIGN|petitionId|Your Full Name|your@email.com|anonymous(optional)"
        )
