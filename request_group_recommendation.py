import json
import os
import sys

import requests
from dotenv import load_dotenv

# --- CONFIGURATION ---
API_BASE = "http://localhost:8000"
REQUEST_TIMEOUT = 120


def load_environment():
    load_dotenv(dotenv_path=os.path.join("backend", ".env"))


def load_group_request(path: str) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def fetch_group_recommendation(payload: dict) -> list:
    api_base = os.environ.get("POPCHOICE_API_BASE", API_BASE)
    response = requests.post(f"{api_base}/recommendations/group", json=payload, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    return response.json()["results"]


def format_result(result: dict) -> str:
    person = f"Person #{result['index'] + 1}"
    if result["status"] != "ok":
        return f"{person}: FAILED at {result.get('stage')} ({result.get('error')})"
    movie = result["movie"]
    year = f" ({movie['releaseYear']})" if movie.get("releaseYear") else ""
    poster = movie.get("poster") or "no poster"
    return f"{person}: {movie['title']}{year}\n    {movie['content']}\n    {poster}"


def main():
    if len(sys.argv) != 2:
        print("usage: request_group_recommendation.py <group-request.json>")
        sys.exit(2)
    load_environment()
    payload = load_group_request(sys.argv[1])
    for result in sorted(fetch_group_recommendation(payload), key=lambda r: r["index"]):
        print(format_result(result))


if __name__ == "__main__":
    main()
