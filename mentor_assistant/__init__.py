"""
Mentor Assistant – holistic tutor performance summaries.

A mentor's incident notes about a tutor are read from Firestore, sent to a
generative model with a fixed instruction template, and the JSON object in
the model's answer is extracted and returned:

  - scorecard format → summary + 1-5 scores for seven fixed criteria
  - patterns format  → summary + behavioural patterns + suggestions
"""

__version__ = "0.1.0"
