"""Raw muscle names -> the six canonical muscle groups used in analytics."""

CANONICAL_GROUPS = ("Chest", "Back", "Shoulders", "Arms", "Legs", "Core")
OTHER = "Other"

MUSCLE_GROUPS: dict[str, str] = {
    # chest
    "chest": "Chest",
    "pectorals": "Chest",
    "pectoralis major": "Chest",
    "upper chest": "Chest",
    "lower chest": "Chest",
    "middle chest": "Chest",
    # back
    "lats": "Back",
    "latissimus dorsi": "Back",
    "rhomboids": "Back",
    "middle trapezius": "Back",
    "lower trapezius": "Back",
    "traps": "Back",
    "rear deltoids": "Back",
    "erector spinae": "Back",
    "lower back": "Back",
    "middle back": "Back",
    "upper back": "Back",
    # arms
    "biceps": "Arms",
    "biceps brachii": "Arms",
    "triceps": "Arms",
    "triceps brachii": "Arms",
    "forearms": "Arms",
    "brachialis": "Arms",
    "brachioradialis": "Arms",
    # shoulders
    "shoulders": "Shoulders",
    "deltoids": "Shoulders",
    "anterior deltoids": "Shoulders",
    "medial deltoids": "Shoulders",
    "posterior deltoids": "Shoulders",
    "side deltoids": "Shoulders",
    "front deltoids": "Shoulders",
    "upper trapezius": "Shoulders",
    # legs
    "quadriceps": "Legs",
    "quads": "Legs",
    "hamstrings": "Legs",
    "glutes": "Legs",
    "gluteus maximus": "Legs",
    "calves": "Legs",
    "hip flexors": "Legs",
    "adductors": "Legs",
    "abductors": "Legs",
    "thighs": "Legs",
    # core
    "abdominals": "Core",
    "abs": "Core",
    "obliques": "Core",
    "serratus anterior": "Core",
    "transverse abdominis": "Core",
    "lower abs": "Core",
    "upper abs": "Core",
}


def muscle_group(muscle: str) -> str:
    return MUSCLE_GROUPS.get(muscle.strip().lower(), OTHER)
