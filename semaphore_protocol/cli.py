"""
Command-Line Interface for the Semaphore signalling toolkit

Provides key generation, nullifier derivation and an end-to-end demonstration.
"""

import logging
import random
import sys
import time

import click

from semaphore_protocol import __version__
from semaphore_protocol.access_set import AccessSet
from semaphore_protocol.exceptions import SemaphoreError, VerificationError
from semaphore_protocol.factory import BACKEND_REGISTRY, get_proving_backend
from semaphore_protocol.keys import derive_nullifier, generate_keypairs
from semaphore_protocol.poseidon import PoseidonHash
from semaphore_protocol.protocol import SignalProtocol
from semaphore_protocol.security import RandomnessSource
from semaphore_protocol.types import digest_from_hex, digest_to_hex


def _make_rng(seed):
    # Seeded runs are reproducible and therefore NOT secret
    if seed is None:
        return RandomnessSource()
    return random.Random(seed)


def _parse_digest(value, name, hasher):
    try:
        return digest_from_hex(value, hasher.field)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint=name)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def main(verbose):
    """
    Semaphore signalling toolkit

    Anonymous membership signals with per-topic nullifiers over a Poseidon
    Merkle commitment.

    ⚠️  PROTOTYPE - NOT PRODUCTION READY
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


@main.command()
@click.option('--count', type=click.IntRange(min=1), default=1,
              help='Number of key pairs (default: 1)')
@click.option('--seed', type=int, default=None,
              help='Deterministic seed (testing only, keys are not secret)')
def keygen(count, seed):
    """
    Generate private/public key pairs as hex digests.

    Examples:

        semaphore keygen --count 4
    """
    hasher = PoseidonHash()
    private_keys, public_keys = generate_keypairs(count, hasher, _make_rng(seed))
    for i, (sk, pk) in enumerate(zip(private_keys, public_keys)):
        click.echo(f"[{i}] private_key: {digest_to_hex(sk)}")
        click.echo(f"[{i}] public_key:  {digest_to_hex(pk)}")


@main.command()
@click.option('--private-key', 'private_key', required=True,
              help='Private key as 64 hex chars')
@click.option('--topic', required=True, help='Topic as 64 hex chars')
def nullifier(private_key, topic):
    """Print the nullifier of a private key on a topic."""
    hasher = PoseidonHash()
    sk = _parse_digest(private_key, '--private-key', hasher)
    t = _parse_digest(topic, '--topic', hasher)
    click.echo(digest_to_hex(derive_nullifier(sk, t, hasher)))


@main.command()
@click.option('--height', type=click.IntRange(min=0, max=24), default=4,
              help='Access set holds 2^height members (default: 4)')
@click.option('--index', type=click.IntRange(min=0), default=12,
              help='Signalling member position (default: 12)')
@click.option('--cap-height', 'cap_height', type=click.IntRange(min=0), default=0,
              help='Published cap height (default: 0, a single root)')
@click.option('--seed', type=int, default=None,
              help='Deterministic seed (testing only)')
@click.option('--backend', type=click.Choice(sorted(BACKEND_REGISTRY)),
              default=None, help='Proving backend (default: feature flags)')
def demo(height, index, cap_height, seed, backend):
    """
    Build an access set, signal as one member, and verify.

    Examples:

        semaphore demo --height 6 --index 12
    """
    n = 1 << height
    if index >= n:
        raise click.BadParameter(
            f"index must be below 2^height = {n}", param_hint='--index'
        )
    if cap_height > height:
        raise click.BadParameter(
            f"cap height must not exceed height {height}", param_hint='--cap-height'
        )

    click.echo("\n" + "=" * 70)
    click.echo(click.style("Semaphore Signal Demonstration", fg="cyan", bold=True))
    click.echo("=" * 70)

    try:
        hasher = PoseidonHash()
        rng = _make_rng(seed)
        protocol = SignalProtocol(backend=get_proving_backend(prefer=backend))

        click.echo(f"\nGenerating {n} key pairs...")
        private_keys, public_keys = generate_keypairs(n, hasher, rng)
        access_set = AccessSet.build(public_keys, cap_height=cap_height, hasher=hasher)
        click.echo(f"✓ {access_set!r}")
        click.echo(f"  public key[{index}]: {digest_to_hex(public_keys[index])}")

        topic = hasher.field.sample_digest(rng)
        click.echo(f"  topic: {digest_to_hex(topic)}")

        click.echo(f"\nProving with backend '{protocol.backend.backend_name}'...")
        start = time.perf_counter()
        signal, verifier_data = protocol.make_signal(
            access_set, private_keys[index], topic, index
        )
        time_prove = time.perf_counter() - start
        click.echo(f"  nullifier: {digest_to_hex(signal.nullifier)}")

        start = time.perf_counter()
        protocol.verify_signal(access_set, topic, signal, verifier_data)
        time_verify = time.perf_counter() - start
        click.echo(click.style("✓ Signal verified", fg="green"))
        click.echo(f"  time_prove={time_prove:.3f}s time_verify={time_verify:.3f}s")

        other_topic = hasher.field.sample_digest(rng)
        try:
            protocol.verify_signal(access_set, other_topic, signal, verifier_data)
        except VerificationError:
            click.echo(click.style("✓ Same signal rejected on another topic", fg="green"))
        else:
            click.echo(
                click.style("✗ Signal accepted on another topic", fg="red"), err=True
            )
            sys.exit(1)
    except SemaphoreError as e:
        click.echo(click.style(f"\n✗ Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo("\n" + "=" * 70)


if __name__ == '__main__':
    main()
