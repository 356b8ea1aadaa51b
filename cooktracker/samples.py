"""Starter recipes added to an empty library."""

SAMPLE_RECIPES = (
    {
        "title": "Easy Omurice",
        "ingredients": "2 eggs\n200 g cooked rice\n2 tbsp ketchup\n1/4 onion\n2 slices bacon",
        "instructions": (
            "1. Fry the onion and bacon\n"
            "2. Add the rice and season with ketchup\n"
            "3. Wrap in a soft omelette"
        ),
        "category": "Meal",
        "difficulty": 2,
        "estimated_time_minutes": 20,
    },
    {
        "title": "Basic Miso Soup",
        "ingredients": "1 tbsp miso\n1 tsp dashi powder\n1/4 block tofu\nwakame to taste",
        "instructions": (
            "1. Bring 400 ml of water to the boil\n"
            "2. Add the dashi powder\n"
            "3. Add the tofu and wakame\n"
            "4. Dissolve the miso"
        ),
        "category": "Meal",
        "difficulty": 1,
        "estimated_time_minutes": 10,
    },
    {
        "title": "Chicken Curry",
        "ingredients": "300 g chicken\n1 onion\n1/2 box curry roux\n2 potatoes\n1 carrot",
        "instructions": (
            "1. Cut the vegetables\n"
            "2. Brown the chicken\n"
            "3. Fry the vegetables\n"
            "4. Add water and simmer\n"
            "5. Dissolve the curry roux"
        ),
        "category": "Meal",
        "difficulty": 3,
        "estimated_time_minutes": 45,
    },
    {
        "title": "Fruit Salad",
        "ingredients": "1 apple\n1 banana\n1 orange\n2 tbsp yogurt\n1 tsp honey",
        "instructions": (
            "1. Cut the fruit into bite-sized pieces\n"
            "2. Mix in a bowl\n"
            "3. Add the yogurt and honey"
        ),
        "category": "Dessert",
        "difficulty": 1,
        "estimated_time_minutes": 10,
    },
)


__all__ = ["SAMPLE_RECIPES"]
