"""Prompt templates for damage analysis and prevention planning."""

ANALYSIS_PROMPT = """Analyze this image and identify any types of damage to walls, surfaces, or structures. 

Please provide a detailed analysis in the following format:
1. **Damage Type**: Clearly identify the type of damage (e.g., cracks, water damage, mold, holes, paint peeling, etc.)
2. **Severity**: Rate the severity as Low, Medium, or High
3. **Description**: Provide a detailed description of what you observe
4. **Affected Area**: Describe the location and extent of the damage
5. **Immediate Concerns**: List any immediate safety or structural concerns

If no damage is visible, please state "No visible damage detected" and provide general maintenance recommendations.

Focus specifically on:
- Cracks in walls or ceilings
- Water stains or moisture damage
- Mold or mildew
- Holes or dents
- Paint or wallpaper issues
- Structural concerns
- Any other visible deterioration

Be specific and detailed in your analysis."""

PREVENTION_PROMPT_TEMPLATE = """Based on the following damage analysis, provide comprehensive prevention instructions:

{analysis}

Please provide detailed prevention and maintenance instructions in the following format:

**Prevention Instructions:**
1. **Immediate Actions**: What should be done right now
2. **Short-term Prevention** (1-3 months): Regular maintenance tasks
3. **Long-term Prevention** (6+ months): Preventive measures and upgrades
4. **Materials Needed**: List of tools and materials required
5. **Professional Help**: When to call experts
6. **Cost Estimate**: Rough cost estimates for repairs and prevention
7. **Warning Signs**: What to watch for in the future

Make the instructions practical, clear, and actionable for a homeowner."""


def build_analysis_prompt() -> str:
    """Return the fixed damage analysis instruction sent alongside the image."""
    return ANALYSIS_PROMPT


def build_prevention_prompt(analysis: str) -> str:
    """Return the prevention prompt with the analysis text inserted as-is."""
    # str.replace rather than str.format: the analysis may contain braces.
    return PREVENTION_PROMPT_TEMPLATE.replace("{analysis}", analysis)
