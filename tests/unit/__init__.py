"""Unit tests for the UCF core: codec, normalizer, digests, chains, fixtures, CLI."""
