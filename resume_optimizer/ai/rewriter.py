# resume_optimizer/ai/rewriter.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Any

from resume_optimizer.ai.client import GenerativeClient
from resume_optimizer.errors import ExternalServiceError

logger = logging.getLogger(__name__)

MAX_BULLET_WORDS = 50

EXPERIENCE_SYSTEM_PROMPT = """You are an expert resume writer and ATS optimization specialist.
Rewrite each experience bullet as Action + Context + Result:
1. Start with a strong past-tense action verb
2. Say what was worked on and where
3. End with a measurable result
Keep every bullet truthful and under 30 words. Do not invent employers or technologies."""

PROJECT_SYSTEM_PROMPT = """You are an expert resume writer and ATS optimization specialist.
Rewrite each project bullet as Technology + Impact + Metrics:
1. Name the technologies used
2. Say what the work achieved
3. Include a metric
Keep every bullet truthful and under 30 words. Do not invent technologies that are not listed."""


@dataclass
class RewriteBatch:
    """Result of rewriting a list of bullets"""
    bullets: List[str]
    rewritten_indices: List[int] = field(default_factory=list)
    fallback: bool = False
    error: Optional[str] = None

    def to_dict(self):
        return {
            'bullets': list(self.bullets),
            'rewritten_indices': list(self.rewritten_indices),
            'fallback': self.fallback,
            'error': self.error,
        }


class BulletRewriter:
    """
    Rewrite bullets through the generative provider.

    The provider must answer with a JSON array of strings. Candidates are
    merged index by index against the originals: any index whose
    candidate is missing, empty or too long keeps its original text. Any
    provider or parse failure returns the originals with ``fallback`` set.
    """

    def __init__(self, client: Optional[GenerativeClient] = None):
        self.client = client or GenerativeClient()

    def rewrite(
        self,
        bullets: List[str],
        target_role: str,
        keywords: List[str],
        style: str = 'experience',
        tech_stack: Optional[List[str]] = None
    ) -> RewriteBatch:
        """
        Rewrite a group of bullets

        Args:
            bullets: Original bullets (one entry or project)
            target_role: Target job title
            keywords: Priority keywords to incorporate
            style: 'experience' (Action+Context+Result) or 'projects'
                (Technology+Impact+Metrics)
            tech_stack: Technologies of the project, for project bullets

        Returns:
            RewriteBatch with merged bullets
        """
        if not bullets:
            return RewriteBatch(bullets=[])

        system_prompt = PROJECT_SYSTEM_PROMPT if style == 'projects' else EXPERIENCE_SYSTEM_PROMPT
        prompt = self._build_prompt(bullets, target_role, keywords, tech_stack)

        try:
            candidates = self.client.generate_json(prompt, system_prompt=system_prompt)
        except ExternalServiceError as e:
            logger.warning(f"Bullet rewrite failed, keeping originals: {e}")
            return RewriteBatch(bullets=list(bullets), fallback=True, error=str(e))

        if not isinstance(candidates, list):
            logger.warning("Bullet rewrite returned a non-list payload, keeping originals")
            return RewriteBatch(bullets=list(bullets), fallback=True, error="expected a JSON array")

        merged, rewritten = merge_bullets(bullets, candidates)
        logger.info(f"✓ Rewrote {len(rewritten)}/{len(bullets)} bullets")
        return RewriteBatch(bullets=merged, rewritten_indices=rewritten)

    @staticmethod
    def _build_prompt(
        bullets: List[str],
        target_role: str,
        keywords: List[str],
        tech_stack: Optional[List[str]]
    ) -> str:
        numbered = "\n".join(f"{i + 1}. {b}" for i, b in enumerate(bullets))
        lines = [
            f"Target role: {target_role}",
            f"Priority keywords: {', '.join(keywords[:8])}",
        ]
        if tech_stack:
            lines.append(f"Technologies: {', '.join(tech_stack)}")
        lines.extend([
            "",
            "Bullets:",
            numbered,
            "",
            f"Return ONLY a JSON array of exactly {len(bullets)} strings, in the same order.",
        ])
        return "\n".join(lines)


def _valid_candidate(candidate: Any) -> bool:
    if not isinstance(candidate, str):
        return False
    text = candidate.strip()
    return bool(text) and len(text.split()) <= MAX_BULLET_WORDS


def merge_bullets(originals: List[str], candidates: List[Any]):
    """
    Merge candidates into originals by position.

    Returns:
        (merged bullets, indices that were replaced)
    """
    merged = []
    rewritten = []
    for i, original in enumerate(originals):
        candidate = candidates[i] if i < len(candidates) else None
        if _valid_candidate(candidate) and candidate.strip() != original.strip():
            merged.append(candidate.strip())
            rewritten.append(i)
        else:
            merged.append(original)
    return merged, rewritten
