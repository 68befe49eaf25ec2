from dataclasses import dataclass
from typing import List, Protocol

from dcthash.errors import IncompatibleHashError


@dataclass(frozen=True)
class Hash:
    """
    Fingerprint of one image.

    `hash_value` holds the bits with the first emitted bit as the most
    significant one; `bit_resolution` is the number of bits, which leading
    zeros make impossible to recover from the integer alone.
    """
    hash_value: int
    bit_resolution: int
    algorithm_id: int

    def _check(self, other: "Hash"):
        if not isinstance(other, Hash):
            raise TypeError(f"Cannot compare Hash with {type(other).__name__}.")
        if self.algorithm_id != other.algorithm_id or self.bit_resolution != other.bit_resolution:
            raise IncompatibleHashError(
                "Hashes were created by different algorithms or configurations "
                f"(id {self.algorithm_id} / {self.bit_resolution} bits vs "
                f"id {other.algorithm_id} / {other.bit_resolution} bits).")

    def hamming_distance(self, other: "Hash") -> int:
        self._check(other)
        return bin(self.hash_value ^ other.hash_value).count("1")

    def normalized_hamming_distance(self, other: "Hash") -> float:
        return self.hamming_distance(other) / self.bit_resolution

    def to_bits(self) -> List[int]:
        return [int(c) for c in format(self.hash_value, "0{}b".format(self.bit_resolution))]

    @property
    def hex(self) -> str:
        return format(self.hash_value, "0{}x".format(-(-self.bit_resolution // 4)))

    def __str__(self):
        return self.hex


class HashingAlgorithm(Protocol):
    """What callers of any image hash strategy rely on."""

    def hash(self, image) -> Hash:
        ...

    def algorithm_id(self) -> int:
        ...
