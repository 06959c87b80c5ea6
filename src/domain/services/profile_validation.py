"""Profile validation pipeline.

Each rule is an explicit predicate over the whole candidate record, so
conditional rules (company name for entrepreneurs, custom gender for
"Other") read the fields they depend on directly. All rules are evaluated
and every violation is reported; nothing short-circuits.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from domain.entities.profile import Gender, Profession, ProfileCandidate, SubscriptionPlan

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*"

USERNAME_LENGTH_MESSAGE = (
    f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
)
USERNAME_WHITESPACE_MESSAGE = "Username cannot contain spaces"
PASSWORD_LENGTH_MESSAGE = f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
PASSWORD_COMPLEXITY_MESSAGE = (
    "Password must contain at least one number and one special character"
)

_WHITESPACE = re.compile(r"\s")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(f"[{re.escape(PASSWORD_SYMBOLS)}]")

Predicate = Callable[[ProfileCandidate], bool]


@dataclass(frozen=True)
class Violation:
    """A single rejected field."""

    field: str
    message: str


@dataclass(frozen=True)
class FieldRule:
    """``check`` must hold whenever ``applies`` does."""

    field: str
    check: Predicate
    message: str
    applies: Predicate = lambda _: True
    credential: bool = False


def _filled(value: str) -> bool:
    return bool(value and value.strip())


def _one_of(enum_cls: type[StrEnum]) -> Callable[[str], bool]:
    values = {member.value for member in enum_cls}
    return lambda value: value in values


_is_profession = _one_of(Profession)
_is_plan = _one_of(SubscriptionPlan)
_is_gender = _one_of(Gender)


USERNAME_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "username",
        lambda c: USERNAME_MIN_LENGTH <= len(c.username) <= USERNAME_MAX_LENGTH,
        USERNAME_LENGTH_MESSAGE,
    ),
    FieldRule(
        "username",
        lambda c: not _WHITESPACE.search(c.username),
        USERNAME_WHITESPACE_MESSAGE,
    ),
)

PASSWORD_RULES: tuple[FieldRule, ...] = (
    FieldRule(
        "password",
        lambda c: len(c.password) >= PASSWORD_MIN_LENGTH,
        PASSWORD_LENGTH_MESSAGE,
        credential=True,
    ),
    FieldRule(
        "password",
        lambda c: bool(_DIGIT.search(c.password) and _SYMBOL.search(c.password)),
        PASSWORD_COMPLEXITY_MESSAGE,
        credential=True,
    ),
)

DEFAULT_RULES: tuple[FieldRule, ...] = (
    *USERNAME_RULES,
    *PASSWORD_RULES,
    FieldRule("profession", lambda c: _is_profession(c.profession), "Invalid profession selected"),
    FieldRule(
        "companyName",
        lambda c: _filled(c.company_name),
        "Company name is required for entrepreneurs",
        applies=lambda c: c.profession == Profession.ENTREPRENEUR,
    ),
    FieldRule("addressLine1", lambda c: _filled(c.address_line1), "Address is required"),
    FieldRule("country", lambda c: _filled(c.country), "Country is required"),
    FieldRule("state", lambda c: _filled(c.state), "State is required"),
    FieldRule("city", lambda c: _filled(c.city), "City is required"),
    FieldRule(
        "subscriptionPlan",
        lambda c: _is_plan(c.subscription_plan),
        "Invalid subscription plan",
    ),
    FieldRule("gender", lambda c: _is_gender(c.gender), "Invalid gender selected"),
    FieldRule(
        "customGender",
        lambda c: _filled(c.custom_gender),
        'Custom gender is required when selecting "Other"',
        applies=lambda c: c.gender == Gender.OTHER,
    ),
)


def username_format_violations(username: str) -> list[Violation]:
    """Username rules alone, shared with the availability lookup."""
    candidate = ProfileCandidate(username=username)
    return ProfileValidationPipeline(USERNAME_RULES).validate(candidate)


def password_policy_violations(password: str, field: str = "password") -> list[Violation]:
    """Password rules alone, reported under ``field``."""
    violations = ProfileValidationPipeline(PASSWORD_RULES).validate(
        ProfileCandidate(password=password)
    )
    return [Violation(field, v.message) for v in violations]


class ProfileValidationPipeline:
    """Runs an ordered list of field rules over a candidate profile."""

    def __init__(self, rules: tuple[FieldRule, ...] = DEFAULT_RULES) -> None:
        self._rules = rules

    def validate(
        self, candidate: ProfileCandidate, include_password: bool = True
    ) -> list[Violation]:
        """Return every violation, in rule order. Empty means valid.

        ``include_password`` is False on updates, where the stored
        credential is not part of the candidate.
        """
        violations: list[Violation] = []
        for rule in self._rules:
            if rule.credential and not include_password:
                continue
            if not rule.applies(candidate):
                continue
            if not rule.check(candidate):
                violations.append(Violation(rule.field, rule.message))
        return violations


class PasswordStrength(StrEnum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


@dataclass(frozen=True)
class PasswordReport:
    valid: bool
    strength: PasswordStrength
    score: int


def password_strength(password: str) -> PasswordReport:
    """Score a password: one point per length tier and per character class."""
    checks = (
        len(password) >= 8,
        len(password) >= 12,
        bool(re.search(r"[0-9]", password)),
        bool(re.search(r"[a-z]", password)),
        bool(re.search(r"[A-Z]", password)),
        bool(re.search(r"[^A-Za-z0-9]", password)),
    )
    score = sum(checks)

    strength = PasswordStrength.WEAK
    if score >= 4:
        strength = PasswordStrength.MEDIUM
    if score >= 6:
        strength = PasswordStrength.STRONG

    return PasswordReport(
        valid=not password_policy_violations(password),
        strength=strength,
        score=score,
    )
