"""Prompt assembly for the ranking oracle."""

from career_match.core.schemas import CatalogItem, UserProfile

RANKING_SYSTEM_PROMPT = (
    "You are a senior career advisor matching a person to career paths.\n\n"
    "Score how well each career path fits the person on a 0-100 scale using "
    "this weighting:\n"
    "  Skills alignment (35%): current skills, skills they want to learn, transferable skills\n"
    "  Interest match (25%): personal interests and preferred fields\n"
    "  Education fit (20%): relevance of their educational background\n"
    "  Career stage fit (10%): appropriate for their career stage\n"
    "  Growth potential (10%): future opportunities\n\n"
    "Only use career path ids that appear in the catalog you are given. "
    "Return ONLY a JSON object (no markdown, no explanation)."
)

_SUMMARY_SKILLS = 3
_SUMMARY_INTERESTS = 2
_PROFILE_LIST_LIMIT = 5


def _join(items: tuple[str, ...], limit: int | None = None, empty: str = "not specified") -> str:
    chosen = items[:limit] if limit is not None else items
    return ", ".join(chosen) if chosen else empty


def build_profile_section(profile: UserProfile, current_path: CatalogItem | None = None) -> str:
    """Describe the person in a few compact lines."""
    age = profile.age()
    education = profile.education or "not specified"
    if profile.degree_program:
        education += f" ({profile.degree_program})"

    lines = [
        f"PROFILE: {profile.stage.value}, Age: {age if age is not None else '?'}, "
        f"Education: {education}",
        f"SKILLS: Current: {_join(profile.current_skills, _PROFILE_LIST_LIMIT)}",
        f"Learning: {_join(profile.skills_to_learn, _PROFILE_LIST_LIMIT)}",
        f"INTERESTS: {_join(profile.interests, _PROFILE_LIST_LIMIT)}",
        f"FIELDS: {_join(profile.interested_fields)}",
    ]
    if profile.work_environment_preference:
        lines.append(f"WORK PREF: {profile.work_environment_preference}")
    if current_path is not None:
        years = (
            f"{profile.years_experience:g}" if profile.years_experience is not None else "?"
        )
        current = (
            f"CURRENT: {current_path.title} ({years} years, "
            f"{profile.seniority_level or '?'} level)"
        )
        if profile.reason_for_change:
            current += f", Change reason: {profile.reason_for_change}"
        lines.append(current)
    if profile.career_goals:
        lines.append(f"GOALS: {profile.career_goals}")
    if profile.free_text_context:
        lines.append(f"NOTES: {profile.free_text_context}")
    return "\n".join(lines)


def build_catalog_summary(catalog: list[CatalogItem]) -> str:
    """One line per career path: id, title, industry and a few skills/interests."""
    lines = []
    for item in catalog:
        skills = ",".join(item.required_skills[:_SUMMARY_SKILLS])
        interests = ",".join(item.required_interests[:_SUMMARY_INTERESTS])
        level = f" | Level: {item.level.value}" if item.level is not None else ""
        lines.append(
            f'{item.id}: "{item.title}" | {item.industry} | Skills: {skills} '
            f"| Interests: {interests}{level}"
        )
    return "\n".join(lines)


def build_ranking_prompt(
    profile: UserProfile,
    catalog: list[CatalogItem],
    target_count: int,
    current_path: CatalogItem | None = None,
) -> str:
    """Assemble the full user prompt for one ranking request."""
    return (
        f"{build_profile_section(profile, current_path)}\n\n"
        f"CAREER PATHS AVAILABLE ({len(catalog)}):\n"
        f"{build_catalog_summary(catalog)}\n\n"
        f"TASK: Analyze and rank suitable career paths. Return your TOP {target_count} "
        "BEST MATCHES as JSON.\n\n"
        "RULES:\n"
        "1. Score each path 0-100\n"
        "2. Include a mix of perfect fits (85-100), strong matches (70-84) and "
        "growth opportunities (55-69)\n"
        "3. Focus on skills AND interests alignment\n"
        "4. Consider transferable skills\n\n"
        "Return this JSON:\n"
        "{\n"
        '  "matches": [\n'
        "    {\n"
        '      "careerPathId": "path_id_here",\n'
        '      "matchScore": 92,\n'
        '      "reasoning": "Brief why this matches (focus on top 2 factors)",\n'
        '      "strengths": ["2 specific strengths"],\n'
        '      "developmentAreas": ["2 key development areas"],\n'
        '      "recommendations": ["3 actionable steps"]\n'
        "    }\n"
        "  ]\n"
        "}"
    )
