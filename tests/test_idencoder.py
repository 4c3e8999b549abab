#! /usr/bin/env python3

import time
import unittest

import idencoder

class TestIdEncoder(unittest.TestCase):

    def setUp(self):
        self.encoder = idencoder.IdEncoder(idencoder.REFERENCE_DEFAULT)

    def test_reference_usage(self):
        self.assertEqual(self.encoder.encode(1, 5), ('fhqyf7', True))
        self.assertEqual(self.encoder.decode('fhqyf7'), (1, True))

        for value in range(1, 11):
            encoded, ok = self.encoder.encode(value, idencoder.MIN_LENGTH)
            self.assertTrue(ok)
            self.assertEqual(self.encoder.decode(encoded), (value, True))

    def test_bounds(self):
        self.assertEqual(self.encoder.encode(0, 0), ('33', True))
        self.assertEqual(self.encoder.decode('33'), (0, True))

        encoded, _ok = self.encoder.encode(idencoder.MAX_VALUE, 0)
        self.assertEqual(self.encoder.decode(encoded),
                         (idencoder.MAX_VALUE, True))

        with self.assertRaises(ValueError):
            self.encoder.encode(-1)
        with self.assertRaises(ValueError):
            self.encoder.encode(idencoder.MAX_VALUE + 1)

    def test_round_trip(self):
        for min_length in (0, 1, 5, 12):
            for value in list(range(0, 300)) + [2**24 - 1, 2**24, 2**40 + 7]:
                encoded, ok = self.encoder.encode(value, min_length)
                self.assertTrue(ok)
                self.assertGreaterEqual(len(encoded), min_length + 1)
                self.assertEqual(self.encoder.decode(encoded), (value, True))

    def test_thresholds(self):
        length = self.encoder.length
        for power in range(1, 5):
            for value in range((length**power) - 2, (length**power) + 2):
                self.assertEqual(self.encoder.debase(self.encoder.enbase(value)),
                                 value)

    def test_no_collisions(self):
        encoded = {self.encoder.encode(value)[0] for value in range(5000)}
        self.assertEqual(len(encoded), 5000)

    def test_not_sequential(self):
        first, _ok = self.encoder.encode(1)
        second, _ok = self.encoder.encode(2)
        self.assertNotEqual(first[1:-1], second[1:-1])

    def test_scramble_involution(self):
        for block_size in (0, 1, 7, 24, 63):
            encoder = idencoder.new(idencoder.DEFAULT_ALPHABET, block_size, 29)
            for value in (0, 1, 2, 255, 2**24 + 5, 2**63 + 1,
                          idencoder.MAX_VALUE):
                self.assertEqual(encoder.scramble(encoder.scramble(value)),
                                 value)

    def test_scramble_reverses_low_bits(self):
        encoder = idencoder.new('01', 4, 2)
        self.assertEqual(encoder.scramble(0b0001), 0b1000)
        self.assertEqual(encoder.scramble(0b0110), 0b0110)
        self.assertEqual(encoder.scramble(0b110011), 0b111100)

        identity = idencoder.new('01', 0, 2)
        self.assertEqual(identity.scramble(12345), 12345)

    def test_padding(self):
        self.assertEqual(self.encoder.enbase(0), '')
        self.assertEqual(self.encoder.enbase(0, 3), '333')
        self.assertEqual(self.encoder.enbase(31), 'f3')
        self.assertEqual(self.encoder.enbase(31, 1), 'f3')
        self.assertEqual(self.encoder.enbase(31, 4), '33f3')

        value = 123456789
        natural = len(self.encoder.enbase(value))
        decoded = {self.encoder.debase(self.encoder.enbase(value, length))
                   for length in range(0, natural + 3)}
        self.assertEqual(decoded, {value})

    def test_checksum_detects_corrupt_head(self):
        encoded, _ok = self.encoder.encode(424242)
        for symbol in self.encoder.alphabet:
            if symbol == encoded[0]:
                continue
            value, ok = self.encoder.decode(symbol + encoded[1:])
            self.assertFalse(ok)
            self.assertEqual(value, 424242)

    def test_malformed_input(self):
        for encoded in ('', 'f'):
            with self.assertRaises(idencoder.DecodeError) as context:
                self.encoder.decode(encoded)
            self.assertEqual(context.exception.reason,
                             idencoder.DecodeError.TOO_SHORT)

        for encoded in ('fhqy!7', '0hqyf7', 'fHQYF7'):
            with self.assertRaises(idencoder.DecodeError) as context:
                self.encoder.decode(encoded)
            self.assertEqual(context.exception.reason,
                             idencoder.DecodeError.INVALID_SYMBOL)

        with self.assertRaises(idencoder.DecodeError) as context:
            self.encoder.decode('f' + 'k' * 20)
        self.assertEqual(context.exception.reason,
                         idencoder.DecodeError.OUT_OF_RANGE)

    def test_oversized_input_rejected_early(self):
        start = time.perf_counter()
        with self.assertRaises(idencoder.DecodeError) as context:
            self.encoder.decode('f' + 'k' * 200000)
        self.assertEqual(context.exception.reason,
                         idencoder.DecodeError.OUT_OF_RANGE)
        self.assertLess(time.perf_counter() - start, 1.0)

    def test_min_length_must_be_integer(self):
        for min_length in ('3', None, 2.0, True, -1):
            with self.assertRaises(ValueError):
                self.encoder.encode(1, min_length)

    def test_configuration_errors(self):
        alphabet = idencoder.DEFAULT_ALPHABET
        for args in ((alphabet, 24, 0),
                     (alphabet, 24, -3),
                     (alphabet, 24, len(alphabet) + 1),
                     ('a', 0, 1),
                     ('', 0, 1),
                     ('abca', 0, 2),
                     (alphabet, -1, 29),
                     (alphabet, idencoder.INTEGER_BITS, 29),
                     (alphabet, '24', 29),
                     (list(alphabet), 24, 29)):
            with self.assertRaises(idencoder.ConfigurationError):
                idencoder.new(*args)

    def test_configurations_differ(self):
        other = idencoder.new(idencoder.DEFAULT_ALPHABET[::-1], 24, 29)
        encoded, _ok = other.encode(1)
        self.assertNotEqual(encoded, self.encoder.encode(1)[0])
        self.assertEqual(other.decode(encoded), (1, True))
        self.assertEqual(other.configuration.alphabet,
                         idencoder.DEFAULT_ALPHABET[::-1])

    def test_heuristics(self):
        self.assertEqual(len(idencoder.DEFAULT_ALPHABET), 31)
        self.assertEqual(self.encoder.configuration,
                         idencoder.REFERENCE_DEFAULT)
        self.assertEqual(len(self.encoder.encode(1)[0]),
                         idencoder.MIN_LENGTH + 1)

if __name__ == '__main__':
    unittest.main()
