"""Built-in word list used when no custom words are configured."""

from __future__ import annotations

DEFAULT_WORDS: tuple[str, ...] = (
    # animals
    "cat", "dog", "fish", "bird", "horse", "cow", "pig", "sheep", "goat", "duck",
    "frog", "snake", "lion", "tiger", "bear", "wolf", "fox", "rabbit", "mouse", "owl",
    "eagle", "shark", "whale", "dolphin", "octopus", "crab", "snail", "spider", "bee", "ant",
    "butterfly", "penguin", "giraffe", "zebra", "elephant", "monkey", "kangaroo", "camel", "turtle", "bat",
    # food
    "apple", "banana", "orange", "grape", "lemon", "cherry", "pear", "pizza", "burger", "bread",
    "cheese", "egg", "cake", "cookie", "donut", "sandwich", "carrot", "potato", "tomato", "corn",
    "popcorn", "pancake", "icecream", "soup", "salad", "sushi", "taco", "noodles", "candy", "pie",
    # objects
    "chair", "table", "lamp", "clock", "phone", "computer", "book", "pencil", "scissors", "key",
    "door", "window", "bed", "sofa", "cup", "fork", "spoon", "knife", "bottle", "umbrella",
    "glasses", "hat", "shoe", "sock", "shirt", "crown", "ring", "candle", "ladder", "hammer",
    "guitar", "drum", "piano", "trumpet", "camera", "balloon", "kite", "rocket", "robot", "anchor",
    # places and nature
    "house", "castle", "bridge", "tower", "school", "farm", "island", "beach", "desert", "forest",
    "mountain", "volcano", "river", "lake", "ocean", "cave", "garden", "city", "road", "tent",
    "sun", "moon", "star", "cloud", "rain", "snow", "rainbow", "lightning", "tree", "flower",
    "leaf", "cactus", "mushroom", "grass", "fire", "wave", "planet", "comet", "tornado", "iceberg",
    # vehicles and sports
    "car", "bus", "train", "plane", "boat", "bicycle", "truck", "helicopter", "tractor", "submarine",
    "football", "basketball", "tennis", "golf", "skateboard", "surfboard", "skis", "medal", "trophy", "whistle",
    # actions and people
    "dance", "swim", "jump", "sleep", "run", "climb", "sing", "read", "cook", "paint",
    "pirate", "wizard", "ghost", "clown", "king", "queen", "knight", "doctor", "chef", "astronaut",
)  # fmt: skip
