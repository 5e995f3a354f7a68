# impostor/themes.py
"""Static catalog of word themes."""
from typing import Dict, List, Optional


class Theme:
    def __init__(self, theme_id: str, name: str, words: List[str]):
        self.theme_id = theme_id
        self.name = name
        self.words = tuple(words)

    def to_dict(self):
        return {"id": self.theme_id, "name": self.name, "words": list(self.words)}


THEMES: List[Theme] = [
    Theme("animals", "Animals", [
        "Lion", "Tiger", "Elephant", "Giraffe", "Zebra",
        "Monkey", "Penguin", "Dolphin", "Eagle", "Snake",
    ]),
    Theme("food", "Food", [
        "Pizza", "Hamburger", "Sushi", "Pasta", "Salad",
        "Ice Cream", "Chocolate", "Apple", "Orange", "Banana",
    ]),
    Theme("colors", "Colors", [
        "Red", "Blue", "Green", "Yellow", "Purple",
        "Orange", "Pink", "Black", "White", "Gray",
    ]),
    Theme("jobs", "Jobs", [
        "Doctor", "Teacher", "Engineer", "Artist", "Chef",
        "Police Officer", "Firefighter", "Pilot", "Veterinarian", "Musician",
    ]),
    Theme("sports", "Sports", [
        "Football", "Basketball", "Tennis", "Swimming", "Athletics",
        "Boxing", "Golf", "Volleyball", "Hockey", "Rugby",
    ]),
    Theme("countries", "Countries", [
        "Mexico", "Spain", "France", "Japan", "Brazil",
        "Canada", "Australia", "Italy", "Germany", "China",
    ]),
]

_BY_ID: Dict[str, Theme] = {t.theme_id: t for t in THEMES}


def get_theme(theme_id: Optional[str]) -> Optional[Theme]:
    if not theme_id:
        return None
    return _BY_ID.get(theme_id)


def list_themes() -> List[Theme]:
    return list(THEMES)
