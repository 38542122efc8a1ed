"""
Supported languages for the remote execution service.
Versions must match runtimes installed on the Piston instance.
"""

LANGUAGE_VERSIONS = {
    "javascript": "18.15.0",
    "typescript": "5.0.3",
    "python": "3.10.0",
    "java": "15.0.2",
    "csharp": "6.12.0",
    "php": "8.2.3",
    "ruby": "3.0.1",
    "c": "10.2.0",
    "cpp": "10.2.0",
}

# Programs in these languages usually read one value per input() / readline()
# call, so "1 2 3" on one line is re-flowed to one value per line.
LINE_ORIENTED_LANGUAGES = {"python", "javascript", "typescript", "ruby", "php"}


def is_supported(language: str) -> bool:
    return language in LANGUAGE_VERSIONS


def normalize_input(language: str, raw: str) -> str:
    """Prepare a test case input for the given language before dispatch."""
    if raw is None:
        return ""

    lines = [line.strip() for line in str(raw).splitlines()]

    if language in LINE_ORIENTED_LANGUAGES:
        reflowed = []
        for line in lines:
            if len(line.split()) > 1:
                reflowed.extend(token for token in line.split() if token)
            else:
                reflowed.append(line)
        lines = reflowed

    return "\n".join(lines)
