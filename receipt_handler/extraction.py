import re

# Money values enclosed in double quotes, e.g. "$200.05".
COST_PATTERN = re.compile(r'"\$[0-9]+(?:\.[0-9]{1,2})?"')

# Keyword -> expense category. Order matters: the first keyword found wins.
EXPENSE_KEYWORDS = {
    "Taxi": "Cabs/Uber",
    "Cab": "Cabs/Uber",
    "Office": "Stationary",
    "Stationary": "Stationary",
}


def extract_costs(text):
    """Returns every quoted dollar amount in `text`, in order, quotes stripped."""
    return [match.group(0).strip('"') for match in COST_PATTERN.finditer(text)]


def classify_expense(text, keywords=EXPENSE_KEYWORDS):
    """
    Returns the category of the first keyword found in `text`, or "".

    A keyword only counts when its first occurrence is past the start of the
    text (index > 0).
    """
    # TODO: confirm with the app owners whether a match at index 0 should count.
    lowered = text.lower()
    for keyword, category in keywords.items():
        if lowered.find(keyword.lower()) > 0:
            return category
    return ""
