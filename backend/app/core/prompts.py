from enum import Enum


class PromptVersion(Enum):
    V1 = "v1"


class Prompts:
    """Centralized prompt repository. Versioned prompts for LLM calls."""

    @staticmethod
    def get_cover_letter_prompt(version: PromptVersion, job_title: str, company: str) -> str:
        if version == PromptVersion.V1:
            return (
                f"Write a professional 2-sentence cover letter for applying to the {job_title} "
                f"role at {company}. Make it engaging and highlight relevant skills."
            )
        else:
            raise ValueError(f"Unsupported prompt version: {version}")

    @staticmethod
    def default_cover_letter(job_title: str, company: str) -> str:
        """Returned when AI generation was not requested."""
        return f"I am excited to apply for the {job_title} position at {company}."

    @staticmethod
    def fallback_cover_letter(job_title: str, company: str) -> str:
        """Returned when AI generation was requested but failed."""
        return (
            f"I am excited to apply for the {job_title} position at {company}. "
            "My skills and experience make me a strong candidate for this role."
        )
