#! /usr/bin/env python3

"""ID Encoder command-line interface

Encode or decode a single value, benchmark round-trips, or generate a
private alphabet to use instead of the default one.

"""

import argparse
import random
import sys
import time

import cityhash

import idencoder

NO_ACTION_MESSAGE = 'Must select one of encode, decode, random, or benchmark'


class IdEncoderTool:

    __slots__ = ('alphabet', 'block_size', 'modulus', 'min_length', 'quiet',
                 'seed', 'encode_value', 'decode_value', 'benchmark_count',
                 'random', 'encoder')

    def __init__(self):
        # See also .configure() when changing these values:
        self.alphabet = idencoder.DEFAULT_ALPHABET
        self.block_size = idencoder.DEFAULT_BLOCK_SIZE
        self.modulus = idencoder.DEFAULT_CHECKSUM
        self.min_length = idencoder.MIN_LENGTH
        self.quiet = False
        self.seed = None        # passphrase for reproducible --random

        self.encode_value = None
        self.decode_value = None
        self.benchmark_count = None
        self.random = False

        self.encoder = None     # built lazily from values above

    def main(self, argv=None):
        """Returns process exit status"""
        parser = self.make_parser()
        self.configure(parser.parse_args(argv))
        if self.seed is not None and not self.random:
            parser.error('--seed is only valid with --random')
        try:
            if self.encode_value is not None:
                print(self.encode(self.encode_value))
            elif self.decode_value is not None:
                value, ok = self.decode(self.decode_value)
                if not ok:
                    print("error=checksum-mismatch input={} value={}"
                          .format(self.decode_value, value), file=sys.stderr)
                    return 1
                print(value)
            elif self.benchmark_count is not None:
                return self.run_benchmark(self.benchmark_count)
            elif self.random:
                alphabet = self.random_alphabet(self.seed)
                if self.quiet:
                    print(alphabet)
                else:
                    print("Random alphabet: {}".format(alphabet))
            else:
                parser.error(NO_ACTION_MESSAGE)
        except idencoder.DecodeError as error:
            print("error={} input={}".format(error.reason, self.decode_value),
                  file=sys.stderr)
            return 1
        except idencoder.ConfigurationError as error:
            print("error=configuration message={}".format(error),
                  file=sys.stderr)
            return 1
        except ValueError as error:
            print("error=invalid-value message={}".format(error),
                  file=sys.stderr)
            return 1

        return 0

    def configure(self, args):
        # See also .__init__() when changing these values:
        self.alphabet = args.alphabet
        self.block_size = args.block_size
        self.modulus = args.modulus
        self.min_length = args.min_length
        self.quiet = args.quiet
        self.seed = args.seed
        self.encode_value = args.encode
        self.decode_value = args.decode
        self.benchmark_count = args.benchmark
        self.random = args.random
        self.encoder = None

    def make_parser(self):
        parser = argparse.ArgumentParser(
            description="Encode integer IDs as short, non-sequential strings",
            epilog='Encoded values are only portable between runs using the'
            ' same alphabet, block size and checksum.')
        parser.add_argument('-a', '--alphabet', dest='alphabet',
                            default=self.alphabet, metavar='ALPHA',
                            help='use ALPHA as the alphabet')
        parser.add_argument('--block-size', dest='block_size', type=int,
                            default=self.block_size, metavar='BITS',
                            help='number of low-order bits to scramble')
        parser.add_argument('--checksum', dest='modulus', type=int,
                            default=self.modulus, metavar='MOD',
                            help='modulus for selecting the checksum symbol')
        parser.add_argument('-l', '--length', dest='min_length', type=int,
                            default=self.min_length, metavar='NUM',
                            help='set min encoded output length to NUM')
        parser.add_argument('-q', '--quiet', dest='quiet',
                            action='store_true', default=self.quiet,
                            help='suppress formatting and instructional output')
        actions = parser.add_mutually_exclusive_group()
        actions.add_argument('-e', '--encode', dest='encode', type=int,
                             metavar='NUM', help='encode NUM')
        actions.add_argument('-d', '--decode', dest='decode',
                             metavar='STR', help='decode STR')
        actions.add_argument('-b', '--benchmark', dest='benchmark', type=int,
                             metavar='NUM',
                             help='run a series of NUM encode/decode cycles')
        actions.add_argument('-r', '--random', dest='random',
                             action='store_true',
                             help='print a random alphabet')
        parser.add_argument('--seed', dest='seed', metavar='PHRASE',
                            help='with --random, derive the alphabet'
                            ' reproducibly from PHRASE')
        return parser

    def get_encoder(self):
        if self.encoder is None:
            self.encoder = idencoder.new(self.alphabet, self.block_size,
                                         self.modulus)
        return self.encoder

    def encode(self, integer):
        """Returns encoded string.  May raise ValueError"""
        encoded, _ok = self.get_encoder().encode(integer, self.min_length)
        return encoded

    def decode(self, encoded):
        """Returns tuple of integer and whether checksum matched.
        May raise DecodeError
        """
        return self.get_encoder().decode(encoded)

    def benchmark(self, iterations):
        """Round-trip integers 0 through ITERATIONS-1.
        Returns: tuple containing number of completed iterations,
        elapsed seconds and first mismatch as (integer, encoded,
        decoded) or None
        """
        encoder = self.get_encoder()
        mismatch = None
        completed = 0
        start = time.perf_counter()
        for integer in range(iterations):
            encoded, _ok = encoder.encode(integer, self.min_length)
            decoded, ok = encoder.decode(encoded)
            if not ok or decoded != integer:
                mismatch = (integer, encoded, decoded)
                break
            completed += 1

        return (completed, time.perf_counter() - start, mismatch)

    def run_benchmark(self, iterations):
        """SIDE-EFFECTS: prints results, handles KeyboardInterrupt"""
        try:
            completed, elapsed, mismatch = self.benchmark(iterations)
        except KeyboardInterrupt:
            print("\nCaught keyboard interrupt.  Exiting.")
            return 0

        if mismatch:
            print("error=mismatch integer={} encoded={} decoded={}"
                  .format(*mismatch), file=sys.stderr)
            return 1
        print("BENCHMARK: Ran {:,} iterations in {:0.3f} seconds"
              .format(completed, elapsed))
        return 0

    def random_alphabet(self, seed=None):
        """Returns shuffled copy of configured alphabet.
        With SEED, the same passphrase always yields the same alphabet.
        """
        if seed is None:
            rng = random.SystemRandom()
        else:
            rng = random.Random(cityhash.CityHash64(seed))
        symbols = list(self.alphabet)
        rng.shuffle(symbols)
        return ''.join(symbols)


def console_main():
    id_encoder_tool = IdEncoderTool()
    sys.exit(id_encoder_tool.main())

if __name__ == '__main__':
    console_main()
