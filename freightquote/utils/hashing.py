import hashlib, json

def pair_key(prefix: str, first: str, second: str) -> str:
    # Unordered: (a, b) and (b, a) share one key.
    s = json.dumps(sorted([first, second]))
    return f"{prefix}:{hashlib.sha256(s.encode()).hexdigest()}"
