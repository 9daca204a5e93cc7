from __future__ import annotations

MIN_PASSWORD_LENGTH = 8


def password_problems(raw: str) -> list[str]:
    """
    Check a candidate password against the account password policy.

    The policy requires at least eight characters with one digit, one
    lowercase letter, one uppercase letter and one non-alphanumeric character.

    :param raw: Candidate password.
    :returns: One message per unmet rule, in a stable order; empty when valid.
    """
    problems: list[str] = []
    if len(raw) < MIN_PASSWORD_LENGTH:
        problems.append(f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not any(ch.isdigit() for ch in raw):
        problems.append("Passwords must have at least one digit ('0'-'9').")
    if not any(ch.islower() for ch in raw):
        problems.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(ch.isupper() for ch in raw):
        problems.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(ch.isalnum() for ch in raw):
        problems.append("Passwords must have at least one non alphanumeric character.")
    return problems
