from typing import List

from langchain_core.prompts import PromptTemplate

from ..models import Candidate


SELECTION_SYSTEM_PROMPT = """
You are an expert test automation engineer. Your task is to select the BEST method(s) from candidates to implement a test step.

CRITICAL SELECTION RULES:
1. ONLY select methods that ACTUALLY match the test step intent
2. If a good match exists, use SELECT and specify the method(s)
3. If NONE of the candidates match the required action, you MUST use CREATE_NEW
4. PREFER specific screen methods over generic ones (BaseScreen)
5. If multiple methods are needed, list ALL in execution order
6. NEVER invent a method name that is not in the candidate list

WHEN TO USE CREATE_NEW:
- The action requires functionality that NO candidate provides
- Example: "toggle picture-in-picture" but no PIP methods -> CREATE_NEW
- DO NOT force-select a generic method when specific functionality is needed

RESPONSE FORMAT (JSON only):
{
  "decision": "SELECT" | "CREATE_NEW",
  "selectedMethods": [
    {"methodName": "exactMethodName", "className": "ClassName", "reason": "why this method"}
  ],
  "confidence": 0.0-1.0,
  "reasoning": "brief explanation"
}
""".strip()

CTV_PATTERNS = """
CTV / REMOTE CONTROL PATTERNS:
1. CTV uses remote navigation: FOCUS an element first (scrollTo*/focus*), then SELECT it
2. Go back with existing back() methods (back(), backFromPlayer()) instead of new navigate*() methods
3. Player operations -> PlayerScreen, episode/show selection -> ContainerScreen, browsing -> HomeScreen
4. If the target is on a DIFFERENT screen than the current one, navigate first
5. Prefer [COMPOSITE] actions that already contain the navigation
""".strip()


SELECTION_PROMPT = PromptTemplate.from_template(
"""
TEST STEP TO IMPLEMENT:
Action: {action}
Target: {target}
Details: {details}
Platform: {platform}
{scenario}{screen_context}

CANDIDATE METHODS FROM CODEBASE:
{candidates}

IMPORTANT:
- If a [COMPOSITE] action matches, prefer it over individual methods.
- Prefer methods from the current/preferred screen class.

Select the best method(s) to implement this test step. If none are suitable, respond with CREATE_NEW.
"""
)


FALLBACK_PROMPT = PromptTemplate.from_template(
"""
Map this test step to a single page-object method.

Action: {action}
Target: {target}
Details: {details}
Platform: {platform}

Respond with JSON only:
{{"found": true|false, "methodName": "camelCaseName", "className": "ScreenClass", "confidence": 0.0-1.0, "reasoning": "brief explanation"}}
"""
)


def system_prompt_for(platform: str = None) -> str:
    if (platform or "").lower() == "ctv":
        return f"{SELECTION_SYSTEM_PROMPT}\n\n{CTV_PATTERNS}"
    return SELECTION_SYSTEM_PROMPT


def format_candidates(candidates: List[Candidate], limit: int = 15) -> str:
    blocks = []
    for i, c in enumerate(candidates[:limit], start=1):
        if c.is_composite and c.composite_steps:
            steps = "\n".join(
                f"      Step {j}: {s.class_name}.{s.method_name}()"
                + (f" - {s.description}" if s.description else "")
                for j, s in enumerate(c.composite_steps, start=1)
            )
            blocks.append(
                f"{i}. [COMPOSITE] {c.method_name}\n"
                f"   Class: {c.class_name}\n"
                f"   Description: {c.description or 'Composite action with multiple steps'}\n"
                f"   Steps:\n{steps}\n"
                f"   Score: {c.confidence * 100:.0f}%"
            )
            continue

        lines = [f"{i}. {c.method_name}", f"   Class: {c.class_name}"]
        if c.parameters:
            lines.append(f"   Params: {', '.join(c.parameters)}")
        if c.javadoc:
            lines.append(f"   Doc: {c.javadoc[:100]}")
        lines.append(f"   Score: {c.confidence * 100:.0f}%")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
