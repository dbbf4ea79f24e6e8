from typing import Final

DATE_FORMAT: Final[str] = "%Y-%m-%d"

DIET_VEG: Final[str] = "veg"
DIET_NON_VEG: Final[str] = "non-veg"

ALLOWED_IMAGE_TYPES: Final[frozenset[str]] = frozenset(
    {"image/jpeg", "image/png", "image/webp", "image/gif", "image/heic", "image/heif"}
)

# === Chat prompts ===
SYSTEM_PROMPT_TEMPLATE: Final[str] = (
    "You are HealthyLife, a friendly nutrition assistant. The user's diet preference is {diet}. "
    "Give concise, practical, and encouraging guidance about meals, calories, groceries, and healthier choices. "
    "Prefer {pref_label} options. Keep answers under 120 words, use simple bullet points when useful."
)
SUMMARY_CONTEXT_TEMPLATE: Final[str] = "Conversation summary so far (for context only): {summary}"
SUMMARY_PROMPT: Final[str] = (
    "Summarize this nutrition chat into <= 80 words focusing on goals and constraints, "
    "to improve future answers. Return plain text."
)

VISION_PROMPT: Final[str] = (
    """You are a helpful nutrition assistant. Analyze the attached food photo and reply with:
1) Likely dish/ingredients.
2) Estimated calories and macros (protein, carbs, fat) for one serving.
3) 2-3 short suggestions to make it healthier.
Keep it concise (<120 words)."""
)
VISION_COOLED_REPLY: Final[str] = (
    "I'm temporarily at my image analysis limit. Tip: center the dish, good lighting, "
    "and I can also help by text meanwhile."
)
VISION_RATE_LIMITED_REPLY: Final[str] = (
    "I'm at my image analysis limit right now. I'll be ready again soon. "
    "Meanwhile, I can suggest general nutrition tips if you describe the dish."
)
VISION_EMPTY_REPLY: Final[str] = "I analyzed the image."

# === Recommendation prompts ===
# Braces doubled: only used inside str.format templates below.
RECIPE_JSON_SHAPE: Final[str] = (
    '{{ "recipes": [ {{ "name": string, "items": string[], "instructions": string }} ] }}'
)
STRICT_RECIPE_PROMPT: Final[str] = (
    """I have these grocery items in my cart: {cart}.
My diet preference is {diet}.
Please suggest 4 quick, budget-friendly recipes (under 20 minutes each) that use these items.
Return ONLY valid JSON in this exact format (no markdown, no extra text):
{{"recipes": [{{"name": "Recipe Name", "items": ["ingredient1", "ingredient2"], "instructions": "Brief cooking steps"}}]}}"""
)
RULES_RECIPE_PROMPT: Final[str] = (
    """You are a helpful nutrition assistant.
Rules:
- Diet: {diet}.
- Propose 4 quick, budget-friendly recipes (target < 20 minutes each).
- Prefer using items from the cart; you may add up to 2 common pantry items if necessary (e.g., salt, oil).
- Keep ingredient lists short (<= 6 items each) and simple instructions (<= 2 sentences).
- Return ONLY valid JSON (no markdown) exactly in this shape:
  """ + RECIPE_JSON_SHAPE + """

Cart items: {cart}"""
)
RETRY_RECIPE_PROMPT: Final[str] = (
    "Return ONLY valid JSON. Shape: " + RECIPE_JSON_SHAPE + ". Diet: {diet}. Cart: {cart}"
)

# === Local fallback ===
CALORIE_BULLETS: Final[tuple[str, ...]] = (
    "Estimate portions: half veggies, quarter protein, quarter carbs.",
    "Pick lean proteins ({protein}) and whole grains.",
    "Aim for consistent meals and stay hydrated.",
)
RECIPE_BULLETS: Final[tuple[str, ...]] = (
    "Try a quick {pref_label} plate: protein + veggies stir-fry + whole grain.",
    "Use minimal oil; season with herbs/spices for flavor.",
    "Balance macros: target protein with each meal.",
)
GROCERY_BULLETS: Final[tuple[str, ...]] = (
    "Base list: leafy greens, colorful veggies, fruits, whole grains.",
    "Protein staples ({pref_label}): {protein}.",
    "Healthy fats: nuts, seeds, olive/groundnut oil.",
)
GENERIC_BULLETS: Final[tuple[str, ...]] = (
    "Clarify your goal (weight, protein, calories) to get a tailored plan.",
    "Keep meals simple: protein + veggies + whole grain + healthy fat.",
    "Plan snacks (fruits, yogurt, nuts) to avoid impulsive eating.",
)
PROTEIN_SOURCES: Final[dict[str, str]] = {
    DIET_VEG: "tofu/paneer/eggs/legumes",
    DIET_NON_VEG: "eggs/chicken/fish/legumes",
}

# === Static grocery plan ===
BASE_ITEMS: Final[dict[str, tuple[str, ...]]] = {
    DIET_VEG: (
        "Spinach", "Broccoli", "Carrots", "Tomatoes", "Chickpeas",
        "Lentils", "Quinoa", "Brown Rice", "Greek Yogurt", "Fruits",
    ),
    DIET_NON_VEG: (
        "Chicken Breast", "Eggs", "Fish", "Greek Yogurt", "Brown Rice",
        "Sweet Potatoes", "Olive Oil", "Avocados", "Fruits", "Veggies",
    ),
}
STATIC_RECIPES: Final[dict[str, tuple[dict, ...]]] = {
    DIET_VEG: (
        {
            "name": "Quinoa Buddha Bowl",
            "items": ["Quinoa", "Chickpeas", "Spinach", "Avocado", "Carrots"],
            "instructions": "Cook quinoa, top with veggies and chickpeas.",
        },
        {
            "name": "Paneer Stir-fry",
            "items": ["Paneer", "Bell Peppers", "Broccoli", "Soy Sauce", "Garlic"],
            "instructions": "Stir-fry paneer and veggies; season to taste.",
        },
    ),
    DIET_NON_VEG: (
        {
            "name": "Grilled Chicken Salad",
            "items": ["Chicken Breast", "Lettuce", "Tomatoes", "Olive Oil", "Lemon"],
            "instructions": "Grill chicken; toss with salad and dressing.",
        },
        {
            "name": "Tuna Wrap",
            "items": ["Whole-wheat Wraps", "Tuna", "Greek Yogurt", "Cucumber", "Dill"],
            "instructions": "Mix tuna and yogurt; assemble wrap.",
        },
    ),
}

# === Smart budget ===
BUDGET_WINDOW_DAYS: Final[int] = 14
DEFAULT_CALORIE_GOAL: Final[int] = 2000
MIN_CALORIE_GOAL: Final[int] = 1400
MAX_CALORIE_GOAL: Final[int] = 3500
BUDGET_VARIANCE_THRESHOLD: Final[float] = 0.1

# === Meal logging ===
FOOD_CHECK_PROMPT: Final[str] = (
    'Classify if the image shows edible food or a prepared meal. Answer ONLY valid JSON: '
    '{ "isFood": boolean, "confidence": number (0-1), "label": string }'
)
MEAL_ESTIMATE_PROMPT: Final[str] = (
    """You are a nutrition analyst. Given a meal photo, estimate total calories, macros, and key vitamins/minerals.
Respond ONLY valid JSON with this exact shape:
{
  "name": string,
  "calories": number,
  "macros": { "protein": number, "carbs": number, "fat": number, "fiber": number, "sugar": number },
  "vitamins": { "vitaminA": string, "vitaminC": string, "iron": string, "calcium": string, "sodium": string }
}
Numbers are for a single serving; vitamins/minerals can be expressed in mg, mcg, IU, or %DV as strings."""
)
# Minimum classifier confidence that counts as "food" per provider; others use the default.
FOOD_CONFIDENCE: Final[dict[str, float]] = {"gemini": 0.5}
DEFAULT_FOOD_CONFIDENCE: Final[float] = 0.6
FOOD_LABEL_PATTERN: Final[str] = (
    r"food|meal|dish|curry|salad|pizza|burger|biryani|dosa|idli|sambar|rice|noodles|pasta|roti|chapati|naan|"
    r"dal|paneer|pulao|poha|paratha|upma|vada|chole|bhature|samosa|pav|tikka|kebab|fish|mutton|egg|omelette|"
    r"sandwich|soup|dessert|sweet|chai|cake|bread"
)
NOT_FOOD_MESSAGE: Final[str] = (
    "The uploaded image does not appear to be food. Please upload a clear meal/food photo."
)
NO_ESTIMATE_MESSAGE: Final[str] = "Invalid image. Please upload a valid food image."
MEAL_INPUT_REQUIRED_MESSAGE: Final[str] = "Image or description required"
# Text estimate used when Nutritionix is not configured: [low, high) kcal.
MOCK_CALORIE_RANGE: Final[tuple[int, int]] = (200, 600)
