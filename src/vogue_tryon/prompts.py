from __future__ import annotations

TRY_ON_TASK = """Task: Virtual Try-On.
Input 1: A photo of a person.
Input 2: A photo of an outfit or garment.
Goal: Generate a high-quality, realistic image of the person from Input 1 wearing the exact outfit from Input 2.
Maintain the person's facial features, hair, and general body shape.
Place them in a clean, stylish studio background."""


def build_try_on_prompt(instruction: str | None = None) -> str:
    """Fixed try-on task text, with the caller's instruction appended when present."""
    extra = (instruction or "").strip()
    if not extra:
        return TRY_ON_TASK
    return f"{TRY_ON_TASK}\nAdditional Instructions: {extra}"


def build_edit_prompt(instruction: str) -> str:
    return (
        "Please edit this image based on the following instruction: "
        f"{instruction.strip()}. Return the modified image."
    )
