# resume_optimizer/ai/__init__.py
"""
Generative-text collaborator used for free-form rewriting
"""

from resume_optimizer.ai.client import GenerativeClient, parse_json_response
from resume_optimizer.ai.rewriter import BulletRewriter, RewriteBatch, merge_bullets

__all__ = [
    'GenerativeClient',
    'parse_json_response',
    'BulletRewriter',
    'RewriteBatch',
    'merge_bullets',
]
