"""
Patterns format – holistic summary plus recurring behavioural patterns and
improvement suggestions.

Returns a JSON object with keys:
  summary, patterns, suggestions
"""

PATTERNS_INSTRUCTIONS = """\
You are an educational performance assistant. Your task is to analyze a list of incidents for a tutor and provide a holistic performance summary.
Analyze ALL incidents AS A WHOLE. You MUST NOT summarize each incident individually.
Respond ONLY with a JSON object matching this schema:
{
  "summary": "A 2-3 sentence overall summary of performance.",
  "patterns": ["A list of key behavioral patterns (strengths or weaknesses)."],
  "suggestions": ["A list of actionable suggestions for improvement (if any)."]
}
Here are the incidents:
$incidents
"""
