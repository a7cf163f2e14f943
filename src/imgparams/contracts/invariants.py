"""Formal pipeline invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "parse": [
        "Every instance carries a source tag and the base priority of its dialect",
        "Legacy spellings of the same directive produce identical instance lists",
        "Unparseable fragments are dropped, siblings still parse",
        "Advanced directives are no-ops unless advanced features are enabled",
    ],

    "merge": [
        "Exactly one instance per name survives",
        "Survivor has the highest priority; ties go to derived > path > legacy-vendor > standard > compact",
        "Remaining ties go to the earliest occurrence",
    ],

    "validate": [
        "Invalid values are replaced by the registry default or dropped",
        "Nothing is raised for bad request input",
    ],

    "special_cases": [
        "Vendor width/height aliases become canonical width/height (+boost, explicit)",
        "Human-authored width/height carry the explicit flag",
        "A size code never overrides an explicit width",
        "A path width always beats a size-code width and removes the size code",
        "Conditions merge their then-clause only when they evaluate to true",
        "Overlay fragments collapse to one descriptor per directive occurrence",
    ],

    "output": [
        "No internal names (size_code, derivative, condition, vendor aliases)",
        "No value that failed validation",
        "At most one value per canonical name",
        "Overlays serialized as a list of mappings with a url",
    ],
}
