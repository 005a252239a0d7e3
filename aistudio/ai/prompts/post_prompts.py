"""
Social Post Prompt Templates.
"""

from typing import Optional

POST_SYSTEM_PROMPT = """You are an expert social media content creator. Generate engaging, professional social media posts.

Business Context:
- Business Name: {business_name}
- Website: {website}

Platform: {platform}
Tone: {tone}
Length: {length}

Guidelines:
- Create engaging, authentic content
- Match the platform's best practices
- Use appropriate tone for the platform
- Include relevant hashtags if appropriate
- Make it shareable and engaging
- Keep it professional but relatable"""


def build_post_prompts(
    topic: str,
    business_name: Optional[str] = None,
    website: Optional[str] = None,
    platform: Optional[str] = None,
    tone: Optional[str] = None,
    length: Optional[str] = None,
) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for a social post request."""
    platform = platform or "general"
    tone = tone or "professional"
    length = length or "medium"
    system = POST_SYSTEM_PROMPT.format(
        business_name=business_name or "Business",
        website=website or "N/A",
        platform=platform,
        tone=tone,
        length=length,
    )
    user = (
        f"Create a {length}-length social media post for {platform} platform "
        f"with a {tone} tone about: {topic}"
    )
    return system, user
