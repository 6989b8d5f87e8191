#!/usr/bin/env python
"""List Gemini models usable for analysis

Prints every model visible to GEMINI_API_KEY that supports
``generateContent``; handy when GEMINI_MODEL / GEMINI_FALLBACK_MODEL
start answering "model not found".

Exit codes:
 0 OK
 1 GEMINI_API_KEY missing
 2 API error

Usage:
  python scripts/list_gemini_models.py [--all]
"""
from __future__ import annotations

import argparse
import os
import sys

from dotenv import load_dotenv
from google import genai
from google.genai import errors as genai_errors

GENERATE_CONTENT = "generateContent"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--all",
        action="store_true",
        help="also list models without generateContent support",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    api_key = (os.getenv("GEMINI_API_KEY") or "").strip()
    if not api_key:
        print("[GEMINI MODELS] GEMINI_API_KEY not found in environment/.env", file=sys.stderr)
        return 1
    print(f"[GEMINI MODELS] API key loaded: {api_key[:4]}... (length: {len(api_key)})")

    client = genai.Client(api_key=api_key)
    try:
        models = list(client.models.list())
    except genai_errors.APIError as exc:
        print(f"[GEMINI MODELS] API error {exc.code}: {exc.message}", file=sys.stderr)
        return 2

    listed = 0
    for model in models:
        actions = model.supported_actions or []
        if not args.all and GENERATE_CONTENT not in actions:
            continue
        print(f"- {(model.name or '').replace('models/', '')}")
        listed += 1
    if not listed:
        print("[GEMINI MODELS] No models found in response.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
