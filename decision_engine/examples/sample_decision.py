"""
Sample decision: choosing an apartment.

Used by the ``demo`` command and handy as a starting point in a REPL:

    from decision_engine.examples.sample_decision import build_example_model
    model = build_example_model()
"""

from decision_engine.engine.model import DecisionModel

OPTIONS = [
    ("Downtown loft", "Small, modern, close to work"),
    ("Suburban house", "Spacious with a yard, long commute"),
    ("Riverside flat", "Mid-size, quiet, average commute"),
    ("Shared townhouse", "Cheap, two housemates"),
]

# name, description, importance (1-5)
CRITERIA = [
    ("Rent", "Monthly cost including utilities", 5),
    ("Commute", "Door-to-door time to the office", 4),
    ("Space", "Living area and storage", 3),
    ("Quiet", "Noise at night", 2),
    ("Neighborhood", "Shops, parks and restaurants nearby", 3),
]

# Rows follow OPTIONS, columns follow CRITERIA.
RATINGS = [
    [2.0, 5.0, 2.0, 2.5, 5.0],
    [3.5, 1.5, 5.0, 4.5, 2.5],
    [3.0, 3.5, 3.5, 4.5, 3.5],
    [5.0, 3.0, 2.5, 2.0, 3.0],
]


def build_example_model() -> DecisionModel:
    """Build the apartment decision with every option fully rated."""
    model = DecisionModel(
        title="Which apartment should I rent?",
        description="Lease starts next month; all four have been visited.",
    )
    options = [model.add_option(name, description) for name, description in OPTIONS]
    criteria = [
        model.add_criterion(name, description, importance=importance)
        for name, description, importance in CRITERIA
    ]
    for option, row in zip(options, RATINGS):
        for criterion, value in zip(criteria, row):
            model.set_rating(option.id, criterion.id, value)
    return model
