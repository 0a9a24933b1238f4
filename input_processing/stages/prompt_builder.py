"""System prompt assembly and model selection.

The system prompt is a deterministic composition of sections joined by a
blank line:

1. a fixed capability description
2. an intent-specific task block (existing code, language, framework,
   requirements and constraints)
3. the conversation context (sentiment, language, search grounding)
4. the editor context, when one was supplied
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config import COMPLEX_MODEL, DEFAULT_MODEL, REASONING_MODEL, ChatSettings
from .intent import CodeRequest, CodeRequestType, EditorContext
from .sentiment import SentimentLabel, SentimentResult

if TYPE_CHECKING:
    from .moderation import ModerationResult

BASE_PROMPT = """You are an expert AI coding assistant with deep knowledge of software development, best practices, and modern frameworks. You help developers by generating, explaining, debugging, and optimizing code.

Key capabilities:
- Generate clean, efficient, and well-documented code
- Explain complex programming concepts clearly
- Debug and fix code issues
- Optimize code for performance and maintainability
- Provide best practices and architectural guidance
- Support multiple programming languages and frameworks

Guidelines:
- Always write production-ready code with proper error handling
- Include clear comments and documentation
- Follow language-specific conventions and best practices
- Consider security, performance, and accessibility
- Provide explanations for your code choices
- Use modern syntax and features when appropriate"""

_GENERATE_INSTRUCTIONS = """Please generate clean, well-structured code that meets the requirements. Include:
- Proper imports and dependencies
- Clear variable and function names
- Comprehensive error handling
- Inline comments explaining complex logic
- Type annotations where applicable"""

_MODIFY_INSTRUCTIONS = """Please modify the code according to the request while:
- Maintaining existing functionality unless explicitly asked to change it
- Following the same coding style and patterns
- Adding proper error handling for new features
- Updating comments and documentation as needed"""

_EXPLAIN_INSTRUCTIONS = """Please provide a clear, comprehensive explanation that includes:
- Overall purpose and functionality
- Step-by-step breakdown of the logic
- Explanation of key concepts and patterns used
- Potential improvements or alternatives
- Common use cases and examples"""

_DEBUG_INSTRUCTIONS = """Please:
- Identify the specific issues in the code
- Explain why these issues occur
- Provide the corrected code
- Suggest preventive measures for similar issues
- Include proper error handling and validation"""

_OPTIMIZE_INSTRUCTIONS = """Please optimize the code by:
- Improving algorithmic complexity where possible
- Reducing memory usage
- Eliminating redundant operations
- Using more efficient data structures
- Applying language-specific optimizations
- Maintaining code readability and maintainability"""

# intent -> (task title, code label, missing-code text, instructions)
_CODE_TASKS: dict[CodeRequestType, tuple[str, str, str, str]] = {
    CodeRequestType.MODIFY: (
        "Modify existing code",
        "Existing code",
        "No existing code provided",
        _MODIFY_INSTRUCTIONS,
    ),
    CodeRequestType.EXPLAIN: ("Explain code", "Code to explain", "No code provided", _EXPLAIN_INSTRUCTIONS),
    CodeRequestType.DEBUG: ("Debug and fix code", "Code with issues", "No code provided", _DEBUG_INSTRUCTIONS),
    CodeRequestType.OPTIMIZE: (
        "Optimize code for performance",
        "Code to optimize",
        "No code provided",
        _OPTIMIZE_INSTRUCTIONS,
    ),
}

EMPATHY_GUIDELINE = "- The user seems frustrated or upset. Respond with empathy and offer constructive help."
ENERGY_GUIDELINE = "- The user appears positive. Match their energy while remaining professional."

REASONING_CUES = ("why", "how", "compare")
COMPLEX_CUES = ("analyze", "explain")


@dataclass(frozen=True)
class AssembledPrompt:
    system_prompt: str
    model_id: str


def _fenced(language: str, code: str) -> str:
    return f"```{language}\n{code}\n```"


def request_specific_prompt(request: CodeRequest) -> str:
    """Task block for the request's intent."""
    if request.type is CodeRequestType.GENERATE:
        lines = ["Current task: Generate new code", f"Language: {request.language}"]
        if request.framework:
            lines.append(f"Framework: {request.framework}")
        if request.requirements:
            lines.append(f"Requirements: {', '.join(request.requirements)}")
        if request.constraints:
            lines.append(f"Constraints: {', '.join(request.constraints)}")
        return "\n".join(lines) + "\n\n" + _GENERATE_INSTRUCTIONS

    title, label, missing, instructions = _CODE_TASKS[request.type]
    lines = [f"Current task: {title}", f"Language: {request.language}"]
    if request.type is CodeRequestType.MODIFY and request.framework:
        lines.append(f"Framework: {request.framework}")
    code = request.existing_code or missing
    return "\n".join(lines) + f"\n\n{label}:\n{_fenced(request.language, code)}\n\n{instructions}"


def conversation_context_prompt(sentiment: SentimentResult, settings: ChatSettings) -> str:
    lines = [
        "Current conversation context:",
        f"- User sentiment: {sentiment.label.value} (confidence: {sentiment.confidence})",
        f"- Language preference: {settings.target_language or 'en'}",
        f"- Search grounding: {'enabled' if settings.use_search_grounding else 'disabled'}",
    ]
    if settings.cultural_background:
        lines.append(f"- Cultural background: {settings.cultural_background}")
    if sentiment.label is SentimentLabel.NEGATIVE:
        lines.append(EMPATHY_GUIDELINE)
    elif sentiment.label is SentimentLabel.POSITIVE:
        lines.append(ENERGY_GUIDELINE)
    return "\n".join(lines)


def editor_context_prompt(context: EditorContext | None) -> str:
    if context is None:
        return ""
    lines = [
        "Current editor context:",
        f"- Active file: {context.current_file}",
        f"- Language: {context.language or ''}",
        f"- Available files: {', '.join(context.files)}",
    ]
    if context.selected_text:
        lines.append(f"- Selected text: {context.selected_text}")
    lines.append("")
    lines.append(
        "Please consider the existing project structure and maintain consistency with the codebase."
    )
    return "\n".join(lines)


class PromptAssembler:
    """Builds the system prompt and picks the model tier.

    Attributes:
        reasoning_model: Tier for why/how/compare questions
        complex_model: Tier for long or analysis-heavy text
        default_model: Lightweight default tier
        complex_text_length: Length above which text counts as complex
    """

    def __init__(
        self,
        reasoning_model: str = REASONING_MODEL,
        complex_model: str = COMPLEX_MODEL,
        default_model: str = DEFAULT_MODEL,
        complex_text_length: int = 500,
    ):
        self.reasoning_model = reasoning_model
        self.complex_model = complex_model
        self.default_model = default_model
        self.complex_text_length = complex_text_length

    def assemble(
        self,
        request: CodeRequest,
        moderation: ModerationResult,
        sentiment: SentimentResult,
        settings: ChatSettings | None = None,
        context: EditorContext | None = None,
    ) -> AssembledPrompt:
        """
        Compose the system prompt and select a model.

        Args:
            request: Parsed coding request
            moderation: Moderation verdict for the request text; must be safe
            sentiment: Sentiment of the request text
            settings: Per-request user settings
            context: Optional editor state

        Returns:
            AssembledPrompt

        Raises:
            ValueError: If ``moderation`` marks the content unsafe
        """
        if not moderation.safe:
            raise ValueError("Cannot assemble a prompt for content that failed moderation")

        settings = settings or ChatSettings()
        sections = [
            BASE_PROMPT,
            request_specific_prompt(request),
            conversation_context_prompt(sentiment, settings),
            editor_context_prompt(context),
        ]
        return AssembledPrompt(
            system_prompt="\n\n".join(s for s in sections if s),
            model_id=self.select_model(request.description, settings),
        )

    def select_model(self, text: str, settings: ChatSettings | None = None) -> str:
        """Forced model, else reasoning, else complex, else default tier."""
        if settings is not None and settings.force_model:
            return settings.force_model

        lowered = (text or "").lower()
        if any(cue in lowered for cue in REASONING_CUES):
            return self.reasoning_model
        if len(text or "") > self.complex_text_length or any(cue in lowered for cue in COMPLEX_CUES):
            return self.complex_model
        return self.default_model


def generate_code_generation_prompt(
    description: str,
    language: str,
    framework: str | None = None,
    requirements: list[str] | None = None,
) -> str:
    target = f"{language} ({framework})" if framework else language
    parts = [f"Generate {target} code for: {description}"]
    if requirements:
        parts.append("Requirements:\n" + "\n".join(f"- {req}" for req in requirements))
    parts.append(
        "Please provide:\n"
        "1. Complete, working code\n"
        "2. Clear explanations of key components\n"
        "3. Usage examples\n"
        "4. Any necessary setup instructions"
    )
    parts.append("Format your response with proper code blocks and clear explanations.")
    return "\n\n".join(parts)


def generate_debugging_prompt(code: str, language: str, error_description: str | None = None) -> str:
    suffix = f" (Error: {error_description})" if error_description else ""
    return (
        f"Debug this {language} code{suffix}:\n\n"
        f"{_fenced(language, code)}\n\n"
        "Please:\n"
        "1. Identify the issue(s)\n"
        "2. Explain why the error occurs\n"
        "3. Provide the corrected code\n"
        "4. Suggest best practices to prevent similar issues"
    )


def generate_optimization_prompt(
    code: str, language: str, optimization_goals: list[str] | None = None
) -> str:
    suffix = f" for: {', '.join(optimization_goals)}" if optimization_goals else ""
    return (
        f"Optimize this {language} code{suffix}:\n\n"
        f"{_fenced(language, code)}\n\n"
        "Please provide:\n"
        "1. Optimized version of the code\n"
        "2. Explanation of improvements made\n"
        "3. Performance impact analysis\n"
        "4. Any trade-offs to consider"
    )
