#!/usr/bin/env python3
"""
AutoApply - Gemini Model Check CLI

List the models your API key can use, or try a set of candidates with a
one-word prompt to see which ones actually answer.

Usage:
    python scripts/list_models.py            # list generateContent models
    python scripts/list_models.py --check    # try each candidate model
"""
import asyncio
import sys
import os

# Add project root to path so we can import autoapply modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from autoapply.services.ai_service import ai_service, AIServiceError

CANDIDATE_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.5-flash-lite",
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
]

USAGE = "Usage: python scripts/list_models.py [--check]"


async def list_models() -> int:
    models = await ai_service.list_models()
    if not models:
        print("No models found. Check your API key.")
        print("\nPlease check:")
        print("1. AUTOAPPLY_GEMINI_API_KEY in .env is correct")
        print("2. Get a new key from: https://aistudio.google.com/app/apikey")
        return 1

    print("\nAvailable Gemini models:\n")
    for name in models:
        print(f"  {name}")
    return 0


async def check_models() -> int:
    print("Checking candidate models...\n")
    working = 0
    for model in CANDIDATE_MODELS:
        try:
            await ai_service.generate("Hello", model=model, max_tokens=16)
            print(f"  OK    {model}")
            working += 1
        except AIServiceError as e:
            print(f"  FAIL  {model} - {str(e).splitlines()[0]}")
    return 0 if working else 1


def main(argv) -> int:
    if len(argv) > 1 or (len(argv) == 1 and argv[0] != "--check"):
        print(USAGE)
        return 1

    if not ai_service.is_available():
        print("Error: AUTOAPPLY_GEMINI_API_KEY is not set (or AI is disabled).")
        return 1

    check = "--check" in argv
    return asyncio.run(check_models() if check else list_models())


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
