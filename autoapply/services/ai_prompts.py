"""
AutoApply - AI Prompt Templates

Prompt templates for every Gemini call the backend makes.

Templates use str.format placeholders; literal braces in the JSON examples
are doubled.
"""

# -----------------------------------------------------------------------------
# Job vs CV Analysis Prompt
# -----------------------------------------------------------------------------
JOB_ANALYSIS_PROMPT = """You are a job application analyzer. Compare this CV with the job description below.

CV:
{cv_text}

JOB DESCRIPTION:
{job_text}

Analyze and return ONLY a valid JSON object with this exact structure (no markdown, no code blocks):
{{
  "compatibility": 75,
  "matchingSkills": ["skill1", "skill2"],
  "missingSkills": ["skill1", "skill2"],
  "eligibility": "Eligible"
}}

Rules:
- compatibility: number 0-100
- eligibility: "Eligible" or "Not Eligible"
- Return ONLY the JSON object, nothing else
"""


# -----------------------------------------------------------------------------
# Job Title Extraction Prompt
# -----------------------------------------------------------------------------
JOB_TITLE_PROMPT = """Analyze this job description and extract the job position/title.
Return ONLY the job title, nothing else. Be concise (e.g., "Software Developer", "Marketing Manager").

Job Description:
{job_text}

Return ONLY the position title:
"""


# -----------------------------------------------------------------------------
# Company Email Extraction Prompt
# -----------------------------------------------------------------------------
COMPANY_EMAIL_PROMPT = """Analyze this job description and extract the company contact email address.
If multiple emails are present, return the HR or recruitment email.
If no email is found, return "NOT_FOUND".

Job Description:
{job_text}

Return ONLY the email address, nothing else.
"""


# -----------------------------------------------------------------------------
# Application Email Prompt
# -----------------------------------------------------------------------------
APPLICATION_EMAIL_PROMPT = """You are a professional email writer. Write a formal job application email based on this CV and job description.

CV:
{cv_text}

JOB DESCRIPTION:
{job_text}

Requirements:
- Professional and confident tone
- VERY CONCISE (100-150 words maximum)
- Use simple, direct language - avoid fancy words like "enthusiastic", "passionate", "eager", "thrilled"
- Brief introduction (1 sentence)
- Mention 2-3 most relevant skills/experiences only
- When mentioning projects, DO NOT use specific project names. Instead categorize them as:
  * Government/real-world projects
  * Award-winning projects
  * University assignments
  * Personal projects
  * Hackathon participation
- One sentence about why you're a good fit
- Mention CV attachment
- DO NOT include contact details or signature at the end
- Sound professional but natural and straightforward

Keep it short and impactful. Return ONLY the email body text.
"""


# -----------------------------------------------------------------------------
# Screenshot OCR Prompt
# -----------------------------------------------------------------------------
OCR_PROMPT = """Extract all text from this job posting image.
Return ONLY the extracted text, maintaining the original structure and formatting as much as possible.
Do not add any commentary or explanation."""


# -----------------------------------------------------------------------------
# Prompt Registry - for viewing via API
# -----------------------------------------------------------------------------
ALL_PROMPTS = {
    "job_analysis": JOB_ANALYSIS_PROMPT,
    "job_title": JOB_TITLE_PROMPT,
    "company_email": COMPANY_EMAIL_PROMPT,
    "application_email": APPLICATION_EMAIL_PROMPT,
    "ocr": OCR_PROMPT,
}


def get_prompt(name: str) -> str:
    """Get a prompt template by name."""
    return ALL_PROMPTS.get(name, "")
