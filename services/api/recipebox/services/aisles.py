from typing import List, Tuple

DEFAULT_AISLE = "Pantry"

# Ordered (aisle, keywords) table. Lookup is first-match-wins over this order,
# so multi-word phrases that must beat a broader keyword sit in an earlier aisle
# ("coconut milk" before "milk", "peanut butter" before "butter").
AISLE_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("Canned & Jarred", [
        "coconut milk", "evaporated milk", "condensed milk",
        "tomato paste", "tomato sauce", "crushed tomato", "diced tomato",
        "canned", "jarred", "broth", "stock",
        "black beans", "kidney beans", "cannellini", "chickpea",
        "peanut butter", "olives", "capers", "pickle", "fish sauce", "artichoke heart",
    ]),
    ("Frozen", ["frozen", "ice cream", "popsicle"]),
    ("Baking", [
        "flour", "sugar", "baking powder", "baking soda", "yeast",
        "vanilla", "cocoa", "chocolate chip", "cornstarch", "cream of tartar",
    ]),
    ("Produce", [
        "apple", "banana", "lemon", "lime", "orange", "berries", "strawberr", "blueberr",
        "avocado", "tomato", "onion", "garlic", "shallot", "scallion",
        "lettuce", "spinach", "kale", "arugula", "cabbage", "carrot", "celery",
        "cucumber", "zucchini", "eggplant", "squash", "butternut", "potato",
        "mushroom", "broccoli", "cauliflower", "bell pepper", "jalapeno",
        "ginger", "cilantro", "parsley", "basil",
    ]),
    ("Meat & Seafood", [
        "beef", "chicken", "pork", "bacon", "sausage", "turkey", "lamb", "veal",
        "steak", "prosciutto", "chorizo", "salami", "meat",
        "shrimp", "prawn", "salmon", "tuna", "fish", "crab", "lobster",
        "scallop", "mussel", "clam", "anchov",
    ]),
    ("Dairy", [
        "milk", "butter", "cheese", "parmesan", "mozzarella", "cheddar", "ricotta",
        "feta", "yogurt", "cream", "egg", "ghee",
    ]),
    ("Condiments & Sauces", [
        "ketchup", "mustard", "mayonnaise", "soy sauce", "vinegar", "hot sauce",
        "salsa", "olive oil", "oil", "honey", "maple syrup", "worcestershire",
        "sriracha", "hoisin", "pesto", "jam",
    ]),
    ("Grains & Pasta", [
        "rice", "quinoa", "pasta", "spaghetti", "penne", "macaroni", "noodle",
        "couscous", "oats", "oatmeal", "barley", "lentil", "bulgur", "farro",
    ]),
    ("Bakery", ["bread", "baguette", "bun", "dinner roll", "tortilla", "pita", "croissant", "bagel", "muffin"]),
    ("Spices & Seasonings", [
        "salt", "pepper", "cumin", "paprika", "cinnamon", "oregano", "thyme",
        "rosemary", "nutmeg", "turmeric", "chili powder", "cayenne", "curry",
        "bay leaf", "clove", "coriander", "seasoning", "spice",
    ]),
    ("Beverages", ["coffee", "green tea", "black tea", "juice", "soda", "wine", "beer", "sparkling water", "kombucha"]),
    ("Snacks", ["chips", "cracker", "pretzel", "popcorn", "granola", "almond", "walnut", "pecan", "cashew", "peanut", "trail mix"]),
]


def classify(name: str) -> str:
    """Map a free-text ingredient name to a store aisle."""
    lowered = (name or "").lower()
    for aisle, keywords in AISLE_KEYWORDS:
        for kw in keywords:
            if kw in lowered:
                return aisle
    return DEFAULT_AISLE
