import math
import random
import uuid

# Filler vocabulary: common English words plus ML terms
WORDS = [
    "the", "be", "to", "of", "and", "a", "in", "that", "have", "I",
    "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
    "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
    "or", "an", "will", "my", "one", "all", "would", "there", "their", "what",
    "so", "up", "out", "if", "about", "who", "get", "which", "go", "me",
    "when", "make", "can", "like", "time", "no", "just", "him", "know", "take",
    "people", "into", "year", "your", "good", "some", "could", "them", "see", "other",
    "than", "then", "now", "look", "only", "come", "its", "over", "think", "also",
    "AI", "model", "neural", "network", "learning", "data", "training", "inference",
    "token", "embedding", "transformer", "attention", "layer", "output", "input",
    "parameter", "weight", "gradient", "optimization", "loss", "accuracy", "batch",
]


class ContentGenerator:
    """
    Produces fake words, sentences and identifiers for mock responses.

    All randomness goes through a single `random.Random`, so two generators
    built with the same seed return identical output for the same sequence
    of calls.
    """

    def __init__(self, seed: int | str | None = None, tokens_per_chunk: int = 3):
        self._rng = random.Random(seed)
        self.tokens_per_chunk = tokens_per_chunk

    def word(self) -> str:
        return WORDS[self._rng.randrange(len(WORDS))]

    def words(self, count: int) -> str:
        return " ".join(self.word() for _ in range(count))

    def sentence(self) -> str:
        """A sentence of 5 to 14 words, capitalized, ending with a period."""
        text = self.words(self._rng.randrange(5, 15))
        return text[:1].upper() + text[1:] + "."

    def paragraph(self) -> str:
        """Two to four sentences."""
        count = self._rng.randrange(2, 5)
        return " ".join(self.sentence() for _ in range(count))

    def stream_chunks(self, total_tokens: int) -> list[str]:
        """
        Split a budget of `total_tokens` words into streaming chunks.

        Each chunk holds between 1 and `tokens_per_chunk` words, never more
        than what is left of the budget. The last chunk ends with a period.
        """
        chunks = []
        remaining = total_tokens

        while remaining > 0:
            size = min(remaining, self._rng.randint(1, max(self.tokens_per_chunk, 1)))
            chunks.append(self.words(size))
            remaining -= size

        if chunks:
            chunks[-1] += "."

        return chunks

    def tool_call_id(self) -> str:
        return f"{self._rng.getrandbits(64):011x}"

    def completion_id(self) -> str:
        return f"chatcmpl-{uuid.UUID(int=self._rng.getrandbits(128), version=4)}"

    def fingerprint(self) -> str:
        return f"fp_{self._rng.getrandbits(64):016x}"

    def signature(self) -> str:
        """Opaque signature attached to thinking blocks."""
        body = "".join(f"{self._rng.getrandbits(8):02x}" for _ in range(40))
        return f"EtUB{body}=="

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """Rough token count: one token per 4 bytes, rounded up."""
        return math.ceil(len(text.encode("utf-8")) / 4)
