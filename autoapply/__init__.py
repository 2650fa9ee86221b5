# AutoApply - Job Application Assistant
"""
AutoApply - Score a job post against your CV and draft the application email.

Paste a job description or upload a screenshot, get a compatibility score,
the recruiter's address and a ready-to-send email with your CV attached.
"""

__version__ = "1.0.0"
__author__ = "AutoApply"
__description__ = "AI job application assistant"
