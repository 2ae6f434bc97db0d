from __future__ import annotations

import asyncio

import pytest

from tote_viewer.validation import (
    GENERIC_MESSAGE,
    BarcodeValidator,
    ErrorTag,
    check_exists,
    first_error_message,
    message_for,
    validate,
)


def test_valid_tote_id_passes_every_check() -> None:
    result = validate("demo-tote-1")

    assert result.valid
    assert result.errors == frozenset()
    assert result.message is None


def test_short_value_fails_min_length() -> None:
    result = validate("ab")

    assert not result.valid
    assert ErrorTag.MIN_LENGTH in result.errors


def test_script_tag_is_flagged_dangerous() -> None:
    result = validate("<script>x</script>")

    assert ErrorTag.DANGEROUS in result.errors
    assert ErrorTag.SPECIAL_CHARS in result.errors


def test_empty_input_only_reports_required() -> None:
    assert validate("").errors == frozenset({ErrorTag.REQUIRED})
    assert validate("   ").errors == frozenset({ErrorTag.REQUIRED})
    assert validate(None).errors == frozenset({ErrorTag.REQUIRED})


def test_max_length_uses_trimmed_value() -> None:
    long_id = "a" * 40 + "-tote-" + "1" * 10

    assert ErrorTag.MAX_LENGTH in validate(long_id).errors
    assert ErrorTag.MAX_LENGTH not in validate("  demo-tote-1  ").errors


def test_inner_whitespace_is_rejected() -> None:
    result = validate("demo tote-1")

    assert ErrorTag.WHITESPACE in result.errors
    assert ErrorTag.PATTERN in result.errors


@pytest.mark.parametrize(
    "value",
    ["javascript:alert(1)", "x onload=1", "<IFRAME src=x>", "a onClick = go"],
)
def test_injection_fragments_are_dangerous(value: str) -> None:
    assert ErrorTag.DANGEROUS in validate(value).errors


@pytest.mark.parametrize("value", ["demotote1", "demo-tote", "demo-tote-x1", "demo--1"])
def test_tote_id_shape(value: str) -> None:
    assert ErrorTag.TOTE_ID_FORMAT in validate(value).errors


def test_blacklist_is_case_insensitive_exact_match() -> None:
    blacklist = {"Demo-Tote-9"}

    assert ErrorTag.BLACKLISTED in validate("demo-tote-9", blacklist=blacklist).errors
    assert ErrorTag.BLACKLISTED not in validate("demo-tote-99", blacklist=blacklist).errors


def test_custom_limits() -> None:
    assert ErrorTag.MIN_LENGTH in validate("a-b-1", min_length=6).errors
    assert ErrorTag.MAX_LENGTH in validate("demo-tote-1", max_length=5).errors


def test_validator_can_restrict_reported_checks() -> None:
    validator = BarcodeValidator(enabled=frozenset({ErrorTag.MIN_LENGTH}))

    assert validator.validate("ABC123").valid
    assert validator.validate("ab").errors == frozenset({ErrorTag.MIN_LENGTH})
    assert validator.validate("").errors == frozenset({ErrorTag.REQUIRED})


def test_messages_are_fixed_per_tag_with_generic_fallback() -> None:
    assert message_for(ErrorTag.REQUIRED) == "Barcode is required"
    assert message_for("dangerous") == "Invalid input detected"
    assert message_for("no-such-tag") == GENERIC_MESSAGE
    assert first_error_message([]) == GENERIC_MESSAGE
    assert first_error_message(["bogus", ErrorTag.DANGEROUS, ErrorTag.MIN_LENGTH]).startswith("Barcode must be at least")


def test_check_exists_reports_missing_barcode() -> None:
    async def checker(value: str) -> bool:
        return False

    tags = asyncio.run(check_exists("demo-tote-1", checker, delay_seconds=0))

    assert tags == frozenset({ErrorTag.NOT_FOUND})


def test_check_exists_fails_open_when_checker_raises() -> None:
    async def checker(value: str) -> bool:
        raise RuntimeError("backend down")

    tags = asyncio.run(check_exists("demo-tote-1", checker, delay_seconds=0))

    assert tags == frozenset()


def test_check_exists_waits_before_asking() -> None:
    delays: list[float] = []
    seen: list[str] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    async def checker(value: str) -> bool:
        seen.append(value)
        return True

    tags = asyncio.run(check_exists("  demo-tote-1 ", checker, sleep=sleep))

    assert tags == frozenset()
    assert delays == [0.5]
    assert seen == ["demo-tote-1"]
