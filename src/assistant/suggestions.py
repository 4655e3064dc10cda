"""
Suggested questions and progress hints for the assistant panels.
"""

from dataclasses import dataclass
from typing import Optional

from src.data.models import ComparisonResult, JobEditorContext
from src.utils.constants import MAX_SUGGESTED_QUESTIONS, WORKFLOW_TARGETS

TITLE_DISPLAY_LIMIT = 30


def job_editor_suggestions(context: JobEditorContext) -> list[str]:
    """
    Questions to offer in the job editor, by priority.

    Title first, then the description, then the core list sections. Advanced
    sections and a final review are only offered once at most one core
    section is still short.
    """
    questions: list[str] = []

    if not context.has_title:
        return [
            "Help me create a new job vacancy",
            "Suggest a job title for a developer role",
        ]

    title = context.title.strip()
    if not context.has_description:
        return [
            f"Write a compelling job description for {title}",
            f"Suggest a location for this {title} role",
        ]

    if context.responsibilities_count < WORKFLOW_TARGETS["responsibilities"]:
        questions.append(f"Suggest 5 key responsibilities for {title}")
    if context.requirements_count < WORKFLOW_TARGETS["requirements"]:
        questions.append("What requirements should I include?")
    if context.benefits_count < WORKFLOW_TARGETS["benefits"]:
        questions.append("Suggest attractive benefits for this role")

    if len(questions) >= 2:
        return questions[:MAX_SUGGESTED_QUESTIONS]

    if not context.business_case_questions:
        questions.append(f"Suggest 3 business case questions for {title}")
    if not context.fixed_interview_questions:
        questions.append(f"Suggest fixed interview questions for {title}")
    if not (context.ai_system_prompt or "").strip():
        questions.append("Help me write AI evaluation criteria")

    questions.append("Review my job posting and suggest improvements")
    return questions[:MAX_SUGGESTED_QUESTIONS]


@dataclass
class WorkflowStep:
    """One row of the job creation progress tracker."""

    label: str
    done: bool
    value: Optional[str] = None


def _display_title(title: str) -> Optional[str]:
    if not title:
        return None
    if len(title) > TITLE_DISPLAY_LIMIT:
        return f'"{title[:TITLE_DISPLAY_LIMIT]}..."'
    return f'"{title}"'


def workflow_progress(context: JobEditorContext) -> list[WorkflowStep]:
    """Steps of the job creation workflow and whether each is complete."""
    responsibilities = context.responsibilities_count
    requirements = context.requirements_count
    benefits = context.benefits_count

    return [
        WorkflowStep("Title", context.has_title, _display_title(context.title)),
        WorkflowStep(
            "Location",
            context.has_location,
            context.location if context.has_location else None,
        ),
        WorkflowStep("Description", context.has_description, "✓" if context.has_description else None),
        WorkflowStep(
            "Responsibilities",
            responsibilities >= WORKFLOW_TARGETS["responsibilities"],
            f"{responsibilities}/5",
        ),
        WorkflowStep(
            "Requirements",
            requirements >= WORKFLOW_TARGETS["requirements"],
            f"{requirements}/{WORKFLOW_TARGETS['requirements']}",
        ),
        WorkflowStep(
            "Benefits",
            benefits >= WORKFLOW_TARGETS["benefits"],
            f"{benefits}/{WORKFLOW_TARGETS['benefits']}",
        ),
    ]


def candidate_suggestions(name: str, disc_profile: Optional[str] = None) -> list[str]:
    """Starter questions about one candidate."""
    questions = [
        f"What are {name}'s key strengths for this role?",
        f"How does {name}'s experience align with the job requirements?",
        f"What interview questions should I ask {name}?",
        f"Summarize {name}'s profile and qualifications",
        f"What concerns should I explore with {name}?",
    ]
    if disc_profile:
        questions.insert(3, f"How does {name}'s {disc_profile} DISC profile affect team fit?")
    return questions[:5]


def comparison_follow_ups(
    question: str,
    response: str,
    comparison: ComparisonResult,
    limit: int = 3,
) -> list[str]:
    """Follow-up questions after a comparison answer, driven by keywords."""
    suggestions: list[str] = []
    question_lower = question.lower()
    response_lower = response.lower()
    top = comparison.recommendation.top_choice

    def mentions(keyword: str) -> bool:
        return keyword in question_lower or keyword in response_lower

    if "why" in question_lower or "reason" in question_lower:
        suggestions.append(f"What specific evidence supports choosing {top}?")
    if mentions("score"):
        suggestions.append("Break down how each candidate scored on different criteria")
    if mentions("risk"):
        suggestions.append(f"How can we mitigate the risks identified for {top}?")
    if mentions("interview"):
        suggestions.append("What interview questions would differentiate these candidates further?")
    if mentions("business case"):
        suggestions.append("Compare their problem-solving approaches in detail")

    if not suggestions:
        suggestions.append(f"Why did {top} rank higher than the others?")
        suggestions.append("What are the key trade-offs between the top candidates?")

    if comparison.recommendation.has_alternative:
        suggestions.append(
            f"When would {comparison.recommendation.alternative} be a better choice?"
        )

    return suggestions[:limit]


def merge_pinned(
    pinned: list[str],
    suggested: list[str],
    candidate_name: Optional[str] = None,
) -> tuple[list[str], list[str]]:
    """
    Split questions into the pinned and suggested groups shown to the user.

    Suggested questions that are already pinned are left out. With a
    candidate name, pinned questions about another candidate are hidden.
    """
    if candidate_name:
        pinned = [q for q in pinned if candidate_name in q or "'s" not in q]
    return list(pinned), [q for q in suggested if q not in pinned]
