#! /usr/bin/env python3

"""Encode (usually sequential) integer IDs as short, non-sequential strings.

The lower BLOCK_SIZE bits of an integer are reversed so that consecutive
values do not produce consecutive strings; higher bits are left as-is.
The scrambled value is then written in the radix of the alphabet and
prefixed by a checksum symbol computed from the original integer.

Deterministic, so no collisions for one fixed configuration.  This is
obfuscation with corruption detection, not encryption.
"""

import collections

# DEFAULT_ALPHABET SHOULD NOT be used in production!  It may change at
# any time, which would break every URL with an encoded ID in it.
# Create your own, e.g., `idencoder_cli.py --random --seed PHRASE`.
# Digits and lower-case letters, minus look-alikes such as "o" vs "0";
# shuffled, with a prime number of characters.
DEFAULT_ALPHABET = '3fq4rv5z7hsdamn8bpygw96j2cetxuk'
DEFAULT_BLOCK_SIZE = 24
DEFAULT_CHECKSUM = 29
MIN_LENGTH = 5

# Encoded IDs interoperate with implementations using unsigned 64 bit ints
INTEGER_BITS = 64
MAX_VALUE = (1 << INTEGER_BITS) - 1


class IdEncoderError(ValueError):
    """Base class for errors raised by this module"""


class ConfigurationError(IdEncoderError):
    """Alphabet, block size or checksum modulus is unusable"""


class DecodeError(IdEncoderError):
    """Encoded string is malformed, as opposed to merely failing checksum"""

    TOO_SHORT = 'too-short'
    INVALID_SYMBOL = 'invalid-symbol'
    OUT_OF_RANGE = 'out-of-range'

    def __init__(self, reason, encoded):
        super().__init__("{}: {!r}".format(reason, encoded))
        self.reason = reason
        self.encoded = encoded


Configuration = collections.namedtuple('Configuration',
                                       ('alphabet', 'block_size', 'modulus'))

REFERENCE_DEFAULT = Configuration(DEFAULT_ALPHABET, DEFAULT_BLOCK_SIZE,
                                  DEFAULT_CHECKSUM)


class IdEncoder:

    __slots__ = ('alphabet', 'block_size', 'modulus',
                 'length', 'inverted', 'mask')

    def __init__(self, configuration):
        """Supply instance of Configuration.
        Raises ConfigurationError when it cannot round-trip values.
        """
        alphabet, block_size, modulus = configuration
        if not isinstance(alphabet, str):
            raise ConfigurationError("alphabet must be a string, got {!r}"
                                     .format(alphabet))
        for name, value in (('block_size', block_size), ('modulus', modulus)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError("{} must be an integer, got {!r}"
                                         .format(name, value))
        if len(alphabet) < 2:
            raise ConfigurationError("alphabet needs at least 2 symbols")
        if len(set(alphabet)) != len(alphabet):
            duplicates = sorted({c for c in alphabet if alphabet.count(c) > 1})
            raise ConfigurationError("alphabet has duplicate symbols: {}"
                                     .format(''.join(duplicates)))
        if not 0 <= block_size < INTEGER_BITS:
            raise ConfigurationError("block_size must be within [0, {})"
                                     .format(INTEGER_BITS))
        if modulus <= 0:
            raise ConfigurationError("modulus must be positive")
        if modulus > len(alphabet):
            # Checksum symbol is looked up as alphabet[n % modulus]
            raise ConfigurationError("modulus {} exceeds alphabet length {}"
                                     .format(modulus, len(alphabet)))

        self.alphabet = alphabet
        self.block_size = block_size
        self.modulus = modulus
        self.length = len(alphabet)
        self.inverted = {char: index for (index, char) in enumerate(alphabet)}
        self.mask = (1 << block_size) - 1

    @property
    def configuration(self):
        return Configuration(self.alphabet, self.block_size, self.modulus)

    def encode(self, integer, min_length=MIN_LENGTH):
        """Returns tuple of INTEGER encoded as string, and True for ok.
        Body is padded to MIN_LENGTH symbols, but never fewer than one,
        so that the checksum head is always followed by something.
        """
        if not isinstance(integer, int) or isinstance(integer, bool):
            raise ValueError("Number must be an integer, got {!r}"
                             .format(integer))
        if not 0 <= integer <= MAX_VALUE:
            raise ValueError("Number must be within [0, {}]".format(MAX_VALUE))
        if (not isinstance(min_length, int) or isinstance(min_length, bool)
                or min_length < 0):
            raise ValueError("Minimum length must be a non-negative integer,"
                             " got {!r}".format(min_length))

        body = self.enbase(self.scramble(integer), max(min_length, 1))
        return (self.checksum(integer) + body, True)

    def decode(self, encoded):
        """Returns tuple of integer and whether checksum matched.
        The integer is a best-effort value when checksum fails and must
        not be trusted.
        Raises DecodeError for malformed ENCODED strings.
        """
        if len(encoded) < 2:
            raise DecodeError(DecodeError.TOO_SHORT, encoded)
        head, tail = encoded[0], encoded[1:]
        if head not in self.inverted:
            raise DecodeError(DecodeError.INVALID_SYMBOL, encoded)
        value = self.scramble(self.debase(tail))

        return (value, self.checksum(value) == head)

    def checksum(self, integer):
        return self.alphabet[integer % self.modulus]

    def scramble(self, integer):
        """Reverse the lowest block_size bits.  Applying twice is identity."""
        result = integer & ~self.mask
        for bit in range(self.block_size):
            if integer & (1 << bit):
                result |= 1 << (self.block_size - bit - 1)

        return result

    def enbase(self, integer, min_length=0):
        """Returns INTEGER in the alphabet's radix, left-padded with the
        zero symbol up to MIN_LENGTH.  Zero has no digits of its own.
        """
        digits = ''
        while integer != 0:
            integer, remainder = divmod(integer, self.length)
            digits = self.alphabet[remainder] + digits

        return digits.rjust(min_length, self.alphabet[0])

    def debase(self, encoded):
        """Returns integer value of ENCODED digits.
        May raise DecodeError for symbols outside the alphabet, or for
        values exceeding MAX_VALUE.
        """
        integer = 0
        for char in encoded:
            try:
                index = self.inverted[char]
            except KeyError:
                raise DecodeError(DecodeError.INVALID_SYMBOL, encoded) from None
            integer = integer * self.length + index
            if integer > MAX_VALUE:
                # Higher bits survive scramble, so no need to fold further
                raise DecodeError(DecodeError.OUT_OF_RANGE, encoded)

        return integer


def new(alphabet, block_size, modulus):
    """Returns IdEncoder for the given values; see Configuration"""
    return IdEncoder(Configuration(alphabet, block_size, modulus))
