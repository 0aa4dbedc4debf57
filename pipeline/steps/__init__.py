"""Pipeline steps package.

This package contains the individual steps of screened flow generation
plus the send-time renderer:
- candidate_generator: Requests and normalizes candidate conversation maps
- roleplay_evaluator: Scores candidates as a simulated recipient panel
- quality_gate: Ranks, gates and selects one candidate
- prompt_renderer: Renders one message node into a validated email
"""
