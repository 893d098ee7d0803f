"""Number guessing game driven by capfx.

The game only describes what it needs (output, input, delays, randomness and
two config entries); the capabilities are chosen at the bottom and could be
swapped for the doubles in ``capfx.handlers.testing`` without touching the
game.

Run with: python examples/guess_number.py
"""

import logging

from capfx import EffectGenerator, bind, do, get, run_sync
from capfx.effects import (
    Print,
    Println,
    RandomInt,
    ask,
    askln,
    delayed_print,
    print_,
    println,
    random_int,
)
from capfx.handlers import StdConsole, SystemRandomInt, ThreadedDelay


def check_answer(secret: int, guess: int) -> bool:
    return secret == guess


@do(uses=[RandomInt, ask, Print, Println])
def play(name: str, low: int, high: int) -> EffectGenerator[None]:
    secret = yield random_int(low, high)
    answer = yield ask(f"Dear {name}, please guess a number from {low} to {high - 1}: ")

    try:
        guess = int(answer)
    except ValueError:
        yield println("You did not enter an integer!")
        return

    if check_answer(secret, guess):
        yield print_(f"You guessed right, {name}!\n")
    else:
        yield print_(f"You guessed wrong, {name}! The number was: {secret}\n")


@do(uses=[askln])
def check_continue(name: str) -> EffectGenerator[bool]:
    while True:
        answer = yield askln(f"Do you want to continue, {name}? (y or n) ")
        choice = answer.strip().lower()
        if choice == "y":
            return True
        if choice == "n":
            return False


@do(uses=[ask, delayed_print, play, check_continue, Print, "min", "max"])
def main() -> EffectGenerator[None]:
    name = yield ask("What is your name? ")
    yield delayed_print(f"Hello, {name} welcome to the game!\n", 1000)

    low, high = yield get("min", "max")

    while True:
        yield play(name, low, high)
        if not (yield check_continue(name)):
            break

    yield print_(f"Thanks for playing, {name}.\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    delays = ThreadedDelay()
    bound = bind(main(), StdConsole(), delays, SystemRandomInt(), min=1, max=6)
    result = run_sync(bound)
    if not result.is_ok():
        raise SystemExit(f"game stopped: {result.error}")
