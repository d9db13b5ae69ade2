"""Pipeline stages — land, placer, planning.

Each stage consumes the previous stage's output.  The stages in order:

  land      — parse and validate the boundary, exclusions and configuration
  placer    — orientations, candidate sizes, grid search, expansion, assembly
  planning  — ``plan_layout``: runs the placer and reports coverage and warnings
"""
