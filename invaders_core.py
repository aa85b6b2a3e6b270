import logging
import random

# Simulation core for the Space Invaders game. Nothing in here touches
# pygame: the world is a plain dict of entity dicts, and `step` advances
# it by exactly one frame. SpaceInvaders.py owns the window, input and
# drawing. Comments explain the tuning constants and the frame phases.

log = logging.getLogger(__name__)

# --- Player ---
PLAYER_W, PLAYER_H = 40, 20
PLAYER_SPEED = 7  # px/frame
PLAYER_FLOOR_GAP = 20  # distance between the player's bottom edge and the floor

# --- Player bullets ---
BULLET_W, BULLET_H = 5, 15
BULLET_SPEED = 10  # px/frame upward
MAX_PLAYER_BULLETS = 5  # live bullets on screen at once

# --- Invader grid ---
# The grid does not depend on the viewport size: 25 columns at a
# 30 px pitch need a window roughly 800 px wide.
INVADER_ROWS = 10
INVADER_COLS = 25
INVADER_W, INVADER_H = 20, 15
INVADER_PADDING = 10
INVADER_ORIGIN = (30, 30)  # top-left of the first invader
INVADER_BASE_SPEED = 0.9  # px/frame horizontally
INVADER_DESCEND_STEP = 20  # px the whole grid drops on each edge bounce

# --- Difficulty ---
# Every kill nudges the grid a little faster. Once per session, when the
# lowest invader gets past PACE_THRESHOLD of the screen height, the speed
# is multiplied by PACE_FACTOR.
KILL_SPEED_BONUS = 0.001
PACE_THRESHOLD = 0.4
PACE_FACTOR = 1.5

# --- Invader fire ---
# One roll per frame (not per invader). On success a random live
# invader drops a bullet from its lower centre.
INVADER_SHOOT_CHANCE = 0.052
INVADER_BULLET_W, INVADER_BULLET_H = 4, 10
INVADER_BULLET_SPEED = 5  # px/frame downward

# --- Barricades ---
# BARRICADE_COUNT clusters, each BLOCKS_WIDE x BLOCKS_HIGH blocks with an
# arch carved out of the lower middle so the player can shoot through.
BARRICADE_COUNT = 4
BARRICADE_BLOCK_SIZE = 8
BARRICADE_BLOCKS_WIDE = 7
BARRICADE_BLOCKS_HIGH = 4
BARRICADE_OFFSET = 120  # px from the bottom of the viewport to the top row
BARRICADE_HEALTH = 3

SCORE_PER_INVADER = 10

MSG_LOSE = "GAME OVER"
MSG_WIN = "YOU WIN!"


def clamp(v, lo, hi):
    """Clamp value v into the inclusive range [lo, hi]."""
    return lo if v < lo else hi if v > hi else v


def aabb(a, b):
    """Axis-aligned bounding box collision test.

    Both arguments are dicts with x, y, w, h keys. Touching edges do not
    count as an overlap.
    """
    return (
        a["x"] < b["x"] + b["w"]
        and a["x"] + a["w"] > b["x"]
        and a["y"] < b["y"] + b["h"]
        and a["y"] + a["h"] > b["y"]
    )


def player_hitbox(player):
    """Rectangle used to test invader bullets against the player."""
    return {"x": player["x"], "y": player["y"], "w": PLAYER_W, "h": PLAYER_H}


def _in_arch(row, col):
    # the notch: bottom two rows, middle three columns
    return row > 1 and 1 < col < 5


def create_barricades(width, height):
    """Build the barricade blocks for a viewport of the given size.

    Clusters are spread evenly so the gaps between them and the two
    outer margins are all equal. Blocks are listed cluster by cluster,
    row by row.
    """
    cluster_w = BARRICADE_BLOCK_SIZE * BARRICADE_BLOCKS_WIDE
    spacing = (width - BARRICADE_COUNT * cluster_w) / (BARRICADE_COUNT + 1)
    top = height - BARRICADE_OFFSET

    blocks = []
    for i in range(BARRICADE_COUNT):
        left = spacing * (i + 1) + cluster_w * i
        for r in range(BARRICADE_BLOCKS_HIGH):
            for c in range(BARRICADE_BLOCKS_WIDE):
                if _in_arch(r, c):
                    continue
                blocks.append(
                    {
                        "x": left + c * BARRICADE_BLOCK_SIZE,
                        "y": top + r * BARRICADE_BLOCK_SIZE,
                        "w": BARRICADE_BLOCK_SIZE,
                        "h": BARRICADE_BLOCK_SIZE,
                        "health": BARRICADE_HEALTH,
                    }
                )
    return blocks


def create_invaders():
    ox, oy = INVADER_ORIGIN
    return [
        {
            "x": c * (INVADER_W + INVADER_PADDING) + ox,
            "y": r * (INVADER_H + INVADER_PADDING) + oy,
            "w": INVADER_W,
            "h": INVADER_H,
        }
        for r in range(INVADER_ROWS)
        for c in range(INVADER_COLS)
    ]


def create_world(width, height):
    """Return a fresh world for a viewport of width x height pixels.

    The world is a dict holding every entity list plus the shared
    invader direction/speed, the one-shot pace flag, the terminal
    flag/message and the score.
    """
    world = {
        "player": {
            "x": (width - PLAYER_W) / 2,
            "y": height - PLAYER_H - PLAYER_FLOOR_GAP,
            "w": PLAYER_W,
            "h": PLAYER_H,
        },
        "bullets": [],
        "invaders": create_invaders(),
        "invader_bullets": [],
        "barricades": create_barricades(width, height),
        "direction": 1,
        "invader_speed": INVADER_BASE_SPEED,
        "speed_boosted": False,
        "game_over": False,
        "message": "",
        "score": 0,
    }
    log.debug(
        "world %dx%d: %d invaders, %d barricade blocks",
        width,
        height,
        len(world["invaders"]),
        len(world["barricades"]),
    )
    return world


def _lose(world):
    world["game_over"] = True
    world["message"] = MSG_LOSE


# --- Frame phases ---
# Each phase mutates the world in place. `step` runs them in a fixed
# order; reordering changes outcomes (e.g. the loss check has to run
# before the shooting pass).


def move_player(world, controls, width):
    dx = (1 if controls.get("right") else 0) - (1 if controls.get("left") else 0)
    player = world["player"]
    player["x"] = clamp(player["x"] + dx * PLAYER_SPEED, 0, width - PLAYER_W)


def fire(world, controls):
    """Spawn one bullet on the player's top edge if a shot is allowed.

    `controls["fire"]` is an edge event from the input layer, so holding
    the key down does not repeat.
    """
    if not controls.get("fire") or len(world["bullets"]) >= MAX_PLAYER_BULLETS:
        return
    player = world["player"]
    world["bullets"].append(
        {
            "x": player["x"] + PLAYER_W / 2 - BULLET_W / 2,
            "y": player["y"] - BULLET_H,
            "w": BULLET_W,
            "h": BULLET_H,
        }
    )


def advance_bullets(world):
    for b in world["bullets"]:
        b["y"] -= BULLET_SPEED
    world["bullets"] = [b for b in world["bullets"] if b["y"] > 0]


def advance_invaders(world, width):
    """Move the grid sideways and report (edge_reached, lowest_y).

    Sets the loss state when any invader's bottom edge reaches the
    player's row.
    """
    speed = world["invader_speed"] * world["direction"]
    player_y = world["player"]["y"]
    edge_reached = False
    lowest_y = 0
    for inv in world["invaders"]:
        inv["x"] += speed
        if inv["x"] <= 0 or inv["x"] >= width - inv["w"]:
            edge_reached = True
        if inv["y"] + inv["h"] >= player_y:
            _lose(world)
        lowest_y = max(lowest_y, inv["y"])
    return edge_reached, lowest_y


def bounce(world):
    world["direction"] *= -1
    for inv in world["invaders"]:
        inv["y"] += INVADER_DESCEND_STEP


def escalate_pace(world, lowest_y, height):
    if world["speed_boosted"] or lowest_y <= height * PACE_THRESHOLD:
        return
    world["invader_speed"] *= PACE_FACTOR
    world["speed_boosted"] = True
    log.debug("pace escalation: invader speed now %.3f", world["invader_speed"])


def invader_fire(world, rng):
    invaders = world["invaders"]
    if rng.random() < INVADER_SHOOT_CHANCE and invaders:
        shooter = invaders[rng.randrange(len(invaders))]
        world["invader_bullets"].append(
            {
                "x": shooter["x"] + shooter["w"] / 2 - INVADER_BULLET_W / 2,
                "y": shooter["y"] + shooter["h"],
                "w": INVADER_BULLET_W,
                "h": INVADER_BULLET_H,
            }
        )


def advance_invader_bullets(world, height):
    for b in world["invader_bullets"]:
        b["y"] += INVADER_BULLET_SPEED
    world["invader_bullets"] = [b for b in world["invader_bullets"] if b["y"] < height]


def _hit_barricade(bullet, barricades):
    # newest blocks first; a hit costs the block one point of health
    for block in reversed(barricades):
        if aabb(bullet, block):
            block["health"] -= 1
            return True
    return False


def resolve_player_bullets(world):
    """Resolve player bullets against barricades, then invaders.

    Bullets are walked latest-first and each one stops at its first
    target. Returns the score earned.
    """
    earned = 0
    bullets = world["bullets"]
    invaders = world["invaders"]
    for i in range(len(bullets) - 1, -1, -1):
        b = bullets[i]
        if _hit_barricade(b, world["barricades"]):
            del bullets[i]
            continue
        for j in range(len(invaders) - 1, -1, -1):
            if aabb(b, invaders[j]):
                del bullets[i]
                del invaders[j]
                earned += SCORE_PER_INVADER
                world["invader_speed"] += KILL_SPEED_BONUS
                break
    return earned


def resolve_invader_bullets(world):
    bullets = world["invader_bullets"]
    hitbox = player_hitbox(world["player"])
    for i in range(len(bullets) - 1, -1, -1):
        b = bullets[i]
        if _hit_barricade(b, world["barricades"]):
            del bullets[i]
            continue
        if aabb(b, hitbox):
            _lose(world)


def crush_barricades(world):
    """Invaders touching a block destroy it outright, whatever its health."""
    barricades = world["barricades"]
    for inv in world["invaders"]:
        for j in range(len(barricades) - 1, -1, -1):
            if aabb(inv, barricades[j]):
                del barricades[j]


def step(world, controls, width, height, rng=random):
    """Advance the world by one frame and return the score earned.

    `controls` is a dict with boolean "left", "right" and "fire" keys.
    `rng` only needs random() and randrange(); the random module is the
    default shared source. Once the game is over this does nothing.
    """
    if world["game_over"]:
        return 0

    move_player(world, controls, width)
    fire(world, controls)
    advance_bullets(world)

    edge_reached, lowest_y = advance_invaders(world, width)
    if edge_reached:
        bounce(world)
    escalate_pace(world, lowest_y, height)

    invader_fire(world, rng)
    advance_invader_bullets(world, height)

    earned = resolve_player_bullets(world)
    world["score"] += earned
    resolve_invader_bullets(world)
    crush_barricades(world)
    world["barricades"] = [b for b in world["barricades"] if b["health"] > 0]

    # A loss earlier in this frame takes precedence over clearing the grid.
    if not world["invaders"] and not world["game_over"]:
        world["game_over"] = True
        world["message"] = MSG_WIN

    if world["game_over"]:
        log.debug("game ended: %s (score %d)", world["message"], world["score"])
    return earned
