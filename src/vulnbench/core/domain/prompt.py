from __future__ import annotations

DETECTOR_SYSTEM_PROMPT = "You are a security vulnerability detection assistant."


def build_detection_prompt(*, content: str) -> str:
    """Build the file analysis prompt for the AI detector."""
    return (
        "You are a security expert analyzing code for vulnerabilities using OWASP and CWE guidelines.\n\n"
        "Only analyze the code content. Do not speculate or make assumptions. "
        "Output strict JSON with this format:\n"
        "{\n"
        "  \"vulnerabilities\": [\n"
        "    {\n"
        "      \"cwe_id\": \"CWE-XXX\",\n"
        "      \"description\": \"...\",\n"
        "      \"line_numbers\": [start, end],\n"
        "      \"impact\": \"...\",\n"
        "      \"explanation\": \"...\"\n"
        "    }\n"
        "  ]\n"
        "}\n"
        "Code:\n"
        f"{content}\n"
    )


def build_fix_message_cwe_prompt(*, message: str) -> str:
    """Ask for the single most likely CWE addressed by a security fix message."""
    return (
        "You are a security expert. Based solely on the commit message below, which describes "
        "a fix to a security vulnerability, infer the most likely CWE category this fix addresses.\n\n"
        "The CWE ID should be based on keywords, patterns, or semantics in the message. "
        "Only return a valid CWE ID like \"CWE-79\". If there is truly no way to reasonably "
        "guess the CWE, return \"UNKNOWN\".\n\n"
        "Commit message:\n"
        f"\"{message}\""
    )


def build_issue_message_cwe_prompt(*, message: str) -> str:
    """Ask whether a static analysis issue message refers to a specific CWE."""
    return (
        "You are a security analyst. A static analysis tool returned the following issue message:\n\n"
        f"\"{message}\"\n\n"
        "Does this message refer to a specific CWE vulnerability? If yes, respond only with the "
        "CWE identifier like CWE-79. If no, respond only with UNKNOWN."
    )
