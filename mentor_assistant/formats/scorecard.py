"""
Scorecard format – holistic summary plus a 1-5 score for each of the seven
fixed criteria.

Returns a JSON object with keys:
  summary, scores (criterion name -> {score, justification})
"""

from mentor_assistant.schemas import CRITERIA

_CRITERIA_LINES = ",\n".join(
    f'    "{name}": {{ "score": 1-5, "justification": "Your justification." }}'
    for name in CRITERIA
)

SCORECARD_INSTRUCTIONS = (
    """\
You are an educational performance assistant. Your task is to analyze a list of incidents for a tutor and provide a holistic performance summary.
Analyze ALL incidents AS A WHOLE. Do NOT summarize each incident individually.

Respond ONLY with a JSON object.

You MUST provide a detailed performance score for EACH of the 7 criteria.
Use a 1-5 scale:
1 = Poor, 2 = Needs Improvement, 3 = Neutral / Insufficient Information, 4 = Good, 5 = Excellent
**CRITICAL RULE:** If there is NO INFORMATION, score it as 3 (Neutral) and justify with 'Insufficient information.'

Your response MUST match this JSON schema:
{
  "summary": "Your 2-3 sentence summary here.",
  "scores": {
"""
    + _CRITERIA_LINES
    + """
  }
}

Here are the incidents:
$incidents
"""
)
