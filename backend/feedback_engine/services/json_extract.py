"""Pull a JSON object out of model output that may carry prose or code fences."""

import json


def extract_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` span in *text*.

    Braces inside string literals are ignored. Raises ``ValueError`` when
    there is no opening brace or the object never closes (typically output
    cut off by the token budget).
    """
    text = (text or "").strip()

    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object in model response")

    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]

        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    raise ValueError("Unbalanced JSON object in model response")


def parse_json_object(text: str) -> dict:
    """Extract and decode the first JSON object in *text*."""
    data = json.loads(extract_json_object(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
