"""
Tick Bitmap - sparse index of initialized ticks

Bit b of word w is set iff tick (w * 256 + b) * tick_spacing is initialized.
Lookups never leave the word of the starting tick; callers step across words.

References:
- Uniswap V3 Core: contracts/libraries/TickBitmap.sol
"""

from typing import Dict, Iterator, Optional, Tuple

from ..constants import MIN_TICK, MAX_TICK
from ..exceptions import SpacingError


def position(compressed: int) -> Tuple[int, int]:
    """Word and bit position of a compressed tick

    Returns:
        (word_pos, bit_pos)
    """
    return compressed >> 8, compressed & 0xFF


def _most_significant_bit(x: int) -> int:
    return x.bit_length() - 1


def _least_significant_bit(x: int) -> int:
    return (x & -x).bit_length() - 1


class TickBitmap:
    """Bitmap of initialized ticks, keyed by word position"""

    def __init__(self):
        self.words: Dict[int, int] = {}

    def __len__(self) -> int:
        return sum(bin(word).count("1") for word in self.words.values())

    def flip_tick(self, tick: int, tick_spacing: int) -> None:
        """Toggle the initialized bit of a tick

        Raises:
            SpacingError: tick is not a multiple of tick_spacing
        """
        if tick % tick_spacing != 0:
            raise SpacingError(f"tick {tick} is not aligned to spacing {tick_spacing}")

        word_pos, bit_pos = position(tick // tick_spacing)
        word = self.words.get(word_pos, 0) ^ (1 << bit_pos)
        if word:
            self.words[word_pos] = word
        else:
            self.words.pop(word_pos, None)

    def is_initialized(self, tick: int, tick_spacing: int) -> bool:
        if tick % tick_spacing != 0:
            return False
        word_pos, bit_pos = position(tick // tick_spacing)
        return bool(self.words.get(word_pos, 0) >> bit_pos & 1)

    def next_initialized_tick_within_one_word(
        self,
        tick: int,
        tick_spacing: int,
        lte: bool
    ) -> Tuple[int, bool]:
        """Next initialized tick in the same word as the current tick

        Searching down (lte) includes the current tick. Searching up starts
        at the next compressed tick, so the current tick is never reported.

        Args:
            tick: starting tick
            tick_spacing: spacing between usable ticks
            lte: True to search toward lower ticks (price decreasing)

        Returns:
            (next_tick, initialized). When nothing is set, next_tick is the
            word boundary in the search direction and initialized is False.
        """
        # floor division rounds toward negative infinity for negative ticks
        compressed = tick // tick_spacing

        if lte:
            word_pos, bit_pos = position(compressed)
            mask = (1 << bit_pos) - 1 + (1 << bit_pos)
            masked = self.words.get(word_pos, 0) & mask

            if masked:
                return (compressed - (bit_pos - _most_significant_bit(masked))) * tick_spacing, True
            return (compressed - bit_pos) * tick_spacing, False

        word_pos, bit_pos = position(compressed + 1)
        mask = ~((1 << bit_pos) - 1)
        masked = self.words.get(word_pos, 0) & mask

        if masked:
            return (compressed + 1 + (_least_significant_bit(masked) - bit_pos)) * tick_spacing, True
        return (compressed + 1 + (255 - bit_pos)) * tick_spacing, False

    def iter_initialized_ticks(
        self,
        tick: int,
        tick_spacing: int,
        lte: bool,
        bound: Optional[int] = None
    ) -> Iterator[int]:
        """Lazily yield initialized ticks in one direction, across words

        Uses the same inclusivity as next_initialized_tick_within_one_word
        and stops once the search passes bound (defaults to the tick domain
        edge).
        """
        if bound is None:
            bound = MIN_TICK if lte else MAX_TICK

        while True:
            tick_next, initialized = self.next_initialized_tick_within_one_word(tick, tick_spacing, lte)
            if (lte and tick_next < bound) or (not lte and tick_next > bound):
                return
            if initialized:
                yield tick_next
            if tick_next == bound:
                return
            tick = tick_next - 1 if lte else tick_next
