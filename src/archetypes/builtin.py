# src/archetypes/builtin.py - v1
"""Built-in archetype catalogs for the code and chess domains.

Declarative data only; registries are assembled by archetypes/registry.py.
Chess success rates are historical white win rates, so "primary" is white.
"""

from __future__ import annotations

from typing import Any

CODE_ARCHETYPES: dict[str, dict[str, Any]] = {
    "rapid_growth": {
        "name": "Rapid Growth",
        "description": "Fast feature development with high code additions",
        "success_rate": 0.65,
        "predicted_outcome": "primary_wins",
        "confidence": 0.7,
        "keywords": ["add", "feature", "implement", "create", "new", "accelerating"],
        "related_archetypes": ["feature_burst", "greenfield"],
        "warning_signals": ["Test coverage declining", "Rising bug reports"],
        "recommendations": [
            "Sustain growth rate while building infrastructure",
            "Schedule refactoring sprints",
        ],
    },
    "refactor_cycle": {
        "name": "Refactor Cycle",
        "description": "Focused code improvement and restructuring",
        "success_rate": 0.75,
        "predicted_outcome": "primary_wins",
        "confidence": 0.8,
        "keywords": ["refactor", "cleanup", "improve", "restructure", "balanced"],
        "related_archetypes": ["tech_debt_spiral", "legacy_rescue"],
        "warning_signals": ["Scope creep", "Breaking changes accumulating"],
        "recommendations": [
            "Complete refactoring before adding new features",
            "Increase test coverage",
        ],
    },
    "tech_debt_spiral": {
        "name": "Tech Debt Spiral",
        "description": "Accumulating technical debt with declining quality indicators",
        "success_rate": 0.35,
        "predicted_outcome": "secondary_wins",
        "confidence": 0.75,
        "keywords": ["hack", "workaround", "todo", "fixme", "declining"],
        "related_archetypes": ["death_march", "bug_hunting"],
        "warning_signals": ["Rising bug count", "Declining velocity", "Team burnout"],
        "recommendations": [
            "Address technical debt immediately",
            "Dedicated debt reduction sprint",
        ],
    },
    "stability_plateau": {
        "name": "Stability Plateau",
        "description": "Maintenance mode with minimal changes",
        "success_rate": 0.7,
        "predicted_outcome": "primary_wins",
        "confidence": 0.6,
        "keywords": ["fix", "update", "bump", "minor", "stable", "steady"],
        "related_archetypes": ["documentation_push", "test_driven"],
        "warning_signals": ["Stagnation risk", "Missing innovation"],
        "recommendations": [
            "Consider innovation to avoid stagnation",
            "Plan next feature cycle",
        ],
    },
    "feature_burst": {
        "name": "Feature Burst",
        "description": "Concentrated period of feature development",
        "success_rate": 0.6,
        "predicted_outcome": "uncertain",
        "confidence": 0.65,
        "keywords": ["feature", "add", "implement", "ship", "release"],
        "related_archetypes": ["rapid_growth", "death_march"],
        "warning_signals": ["Quality degradation", "Integration issues"],
        "recommendations": [
            "Consolidate gains and improve test coverage",
            "Plan consolidation period",
        ],
    },
    "death_march": {
        "name": "Death March",
        "description": "Unsustainable development pace with declining quality",
        "success_rate": 0.25,
        "predicted_outcome": "secondary_wins",
        "confidence": 0.85,
        "keywords": ["urgent", "hotfix", "asap", "critical", "volatile"],
        "related_archetypes": ["tech_debt_spiral", "bug_hunting"],
        "warning_signals": ["Team burnout imminent", "Quality in freefall"],
        "recommendations": [
            "Reduce scope and prioritize sustainability",
            "Consider team health",
        ],
    },
    "test_driven": {
        "name": "Test Driven",
        "description": "Quality-focused development with high test coverage",
        "success_rate": 0.8,
        "predicted_outcome": "primary_wins",
        "confidence": 0.85,
        "keywords": ["test", "spec", "coverage", "assert", "mock"],
        "related_archetypes": ["refactor_cycle", "stability_plateau"],
        "warning_signals": ["Over-testing", "Slow velocity"],
        "recommendations": ["Balance test investment", "Focus on critical paths"],
    },
    "documentation_push": {
        "name": "Documentation Push",
        "description": "Focus on documentation and knowledge sharing",
        "success_rate": 0.7,
        "predicted_outcome": "primary_wins",
        "confidence": 0.7,
        "keywords": ["docs", "readme", "comment", "explain", "guide"],
        "related_archetypes": ["stability_plateau", "refactor_cycle"],
        "warning_signals": ["Documentation debt", "Knowledge silos"],
        "recommendations": ["Integrate docs into workflow", "Regular doc reviews"],
    },
    "infrastructure_shift": {
        "name": "Infrastructure Shift",
        "description": "Major changes to build, deploy, or architecture",
        "success_rate": 0.55,
        "predicted_outcome": "uncertain",
        "confidence": 0.6,
        "keywords": ["config", "deploy", "ci", "docker", "infrastructure", "migrate"],
        "related_archetypes": ["refactor_cycle", "greenfield"],
        "warning_signals": ["Breaking changes", "Deployment issues"],
        "recommendations": ["Thorough testing", "Staged rollout", "Rollback plan"],
    },
    "bug_hunting": {
        "name": "Bug Hunting",
        "description": "Focused period of bug fixes and issue resolution",
        "success_rate": 0.7,
        "predicted_outcome": "primary_wins",
        "confidence": 0.75,
        "keywords": ["fix", "bug", "issue", "resolve", "patch", "error"],
        "related_archetypes": ["tech_debt_spiral", "stability_plateau"],
        "warning_signals": ["Recurring bugs", "Root cause not addressed"],
        "recommendations": ["Address root causes", "Add regression tests"],
    },
    "greenfield": {
        "name": "Greenfield",
        "description": "New project with mostly additions",
        "success_rate": 0.6,
        "predicted_outcome": "uncertain",
        "confidence": 0.5,
        "keywords": ["init", "initial", "setup", "create", "scaffold"],
        "related_archetypes": ["rapid_growth", "feature_burst"],
        "warning_signals": ["Architecture decisions pending", "Foundation quality"],
        "recommendations": ["Establish patterns early", "Invest in foundation"],
    },
    "legacy_rescue": {
        "name": "Legacy Rescue",
        "description": "Modernizing and improving old codebase",
        "success_rate": 0.5,
        "predicted_outcome": "uncertain",
        "confidence": 0.55,
        "keywords": ["upgrade", "migrate", "modernize", "deprecate", "replace"],
        "related_archetypes": ["refactor_cycle", "infrastructure_shift"],
        "warning_signals": ["Compatibility issues", "Hidden complexity"],
        "recommendations": ["Incremental migration", "Maintain compatibility"],
    },
}

CHESS_ARCHETYPES: dict[str, dict[str, Any]] = {
    "kingside_attack": {
        "name": "Kingside Attack",
        "description": "Concentrated piece activity toward the enemy king",
        "success_rate": 0.58,
        "predicted_outcome": "primary_wins",
        "confidence": 0.65,
        "keywords": ["attack", "aggressive", "intense", "accelerating"],
        "related_archetypes": ["pawn_storm", "sacrificial_attack", "opposite_castling"],
        "recommendations": ["Press the attack while maintaining defense"],
        "lookahead_moves": 15,
    },
    "queenside_expansion": {
        "name": "Queenside Expansion",
        "description": "Systematic territorial gain on the a-d files",
        "success_rate": 0.54,
        "predicted_outcome": "primary_wins",
        "confidence": 0.6,
        "keywords": ["expansion", "lateral", "steady"],
        "related_archetypes": ["positional_squeeze"],
        "recommendations": ["Expand territorial control"],
        "lookahead_moves": 20,
    },
    "central_domination": {
        "name": "Central Domination",
        "description": "Dense control of the d4-e5 complex",
        "success_rate": 0.62,
        "predicted_outcome": "primary_wins",
        "confidence": 0.7,
        "keywords": ["central", "control", "active", "balanced"],
        "related_archetypes": ["piece_harmony", "positional_squeeze"],
        "recommendations": ["Leverage central control for flexibility"],
        "lookahead_moves": 25,
    },
    "prophylactic_defense": {
        "name": "Prophylactic Defense",
        "description": "Counter-reactive play preventing opponent threats",
        "success_rate": 0.48,
        "predicted_outcome": "draw",
        "confidence": 0.55,
        "keywords": ["defense", "passive", "quiet", "stable", "balanced"],
        "related_archetypes": ["closed_maneuvering"],
        "recommendations": ["Neutralize threats before seeking activity"],
        "lookahead_moves": 30,
    },
    "pawn_storm": {
        "name": "Pawn Storm",
        "description": "Advancing pawn chain toward the enemy king",
        "success_rate": 0.55,
        "predicted_outcome": "primary_wins",
        "confidence": 0.6,
        "keywords": ["storm", "forward", "aggressive", "accelerating"],
        "related_archetypes": ["kingside_attack", "opposite_castling"],
        "recommendations": ["Open lines before the opponent counterattacks"],
        "lookahead_moves": 12,
    },
    "piece_harmony": {
        "name": "Piece Harmony",
        "description": "Coordinated piece placement with overlapping control",
        "success_rate": 0.6,
        "predicted_outcome": "primary_wins",
        "confidence": 0.65,
        "keywords": ["coordinated", "harmony", "balanced", "stable"],
        "related_archetypes": ["central_domination"],
        "recommendations": ["Improve the worst-placed piece"],
        "lookahead_moves": 18,
    },
    "opposite_castling": {
        "name": "Opposite Side Castling",
        "description": "Race to attack opposite flanks",
        "success_rate": 0.51,
        "predicted_outcome": "draw",
        "confidence": 0.5,
        "keywords": ["race", "volatile", "intense"],
        "related_archetypes": ["kingside_attack", "pawn_storm"],
        "recommendations": ["Prioritize speed of attack over material"],
        "lookahead_moves": 10,
    },
    "closed_maneuvering": {
        "name": "Closed Maneuvering",
        "description": "Slow positional regrouping",
        "success_rate": 0.52,
        "predicted_outcome": "draw",
        "confidence": 0.55,
        "keywords": ["closed", "quiet", "steady", "stable"],
        "related_archetypes": ["prophylactic_defense", "positional_squeeze"],
        "recommendations": ["Prepare pawn breaks patiently"],
        "lookahead_moves": 35,
    },
    "open_tactical": {
        "name": "Open Tactical Battle",
        "description": "High piece activity with captures and exchanges",
        "success_rate": 0.53,
        "predicted_outcome": "draw",
        "confidence": 0.45,
        "keywords": ["tactical", "chaotic", "volatile", "intense"],
        "related_archetypes": ["sacrificial_attack"],
        "recommendations": ["Calculate carefully, avoid simplification"],
        "lookahead_moves": 8,
    },
    "endgame_technique": {
        "name": "Endgame Technique",
        "description": "Precise maneuvering with few pieces",
        "success_rate": 0.58,
        "predicted_outcome": "primary_wins",
        "confidence": 0.7,
        "keywords": ["endgame", "precise", "low", "quiet"],
        "related_archetypes": ["positional_squeeze"],
        "recommendations": ["Activate the king and create a passed pawn"],
        "lookahead_moves": 40,
    },
    "sacrificial_attack": {
        "name": "Sacrificial Attack",
        "description": "Material sacrifice for initiative",
        "success_rate": 0.56,
        "predicted_outcome": "primary_wins",
        "confidence": 0.5,
        "keywords": ["sacrifice", "initiative", "aggressive", "volatile"],
        "related_archetypes": ["kingside_attack", "open_tactical"],
        "recommendations": ["Keep the initiative; every tempo counts"],
        "lookahead_moves": 6,
    },
    "positional_squeeze": {
        "name": "Positional Squeeze",
        "description": "Gradual space restriction",
        "success_rate": 0.61,
        "predicted_outcome": "primary_wins",
        "confidence": 0.7,
        "keywords": ["squeeze", "space", "steady", "stable"],
        "related_archetypes": ["queenside_expansion", "closed_maneuvering"],
        "recommendations": ["Restrict counterplay before converting"],
        "lookahead_moves": 28,
    },
    "unknown": {
        "name": "Unclassified Pattern",
        "description": "Novel or hybrid strategic approach",
        "success_rate": 0.5,
        "predicted_outcome": "uncertain",
        "confidence": 0.3,
        "keywords": [],
        "related_archetypes": [],
        "lookahead_moves": 5,
    },
}

BUILTIN_CATALOGS: dict[str, dict[str, dict[str, Any]]] = {
    "code": CODE_ARCHETYPES,
    "chess": CHESS_ARCHETYPES,
}
