import random

import pytest

from qkd_engine import (
    BB84,
    SARG04,
    EavesdropperConfig,
    NoiseConfig,
    Phase,
    QKDSession,
    UnknownProtocolError,
    encode,
    make_protocol,
)


@pytest.fixture
def session():
    return QKDSession(BB84, rng=random.Random(2024))


def test_initial_state(session):
    state = session.get_state()
    assert state.phase is Phase.PREPARATION
    assert state.session_id.startswith("QKD-")
    assert state.sender_bits == [] and state.receiver_bits == []
    assert state.shared_key == ""
    assert state.end_time == 0


def test_phases_advance_one_step_per_operation(session):
    session.generate(40)
    assert session.phase is Phase.TRANSMISSION
    session.measure(hacker_present=False)
    assert session.phase is Phase.SIFTING
    session.sift()
    assert session.phase is Phase.ERROR_CHECK
    final = session.complete()
    assert final.phase is Phase.COMPLETE
    assert final.end_time >= final.start_time


def test_generate_replaces_sender_bits(session):
    session.generate(30)
    bits = session.generate(12)
    state = session.get_state()
    assert len(bits) == 12
    assert state.sender_bits == bits


def test_measure_keeps_lengths_equal(session):
    session.generate(64)
    session.measure(hacker_present=True)
    state = session.get_state()
    assert len(state.receiver_bits) == len(state.sender_bits) == 64
    assert len(state.intercepted_bits) <= 64
    assert state.hacker_present


def test_key_length_equals_matching_positions(session):
    session.generate(120)
    session.measure(hacker_present=True)
    key = session.sift()
    state = session.get_state()
    matching = [
        s for s, r in zip(state.sender_bits, state.receiver_bits) if s.basis == r.basis
    ]
    assert len(key) == len(matching)
    assert key == "".join(str(s.value) for s in matching)
    assert 0.0 <= state.error_rate <= 100.0


def test_end_to_end_without_eavesdropper(session):
    session.generate(100)
    session.measure(hacker_present=False)
    key = session.sift()
    state = session.get_state()
    assert 30 <= len(key) <= 70
    assert state.error_rate < 10.0


def test_error_rate_near_zero_on_ideal_channel():
    session = QKDSession(BB84, rng=random.Random(7))
    session.generate(4000)
    session.measure(hacker_present=False)
    session.sift()
    assert session.get_state().error_rate < 3.0


def test_full_interception_raises_error_rate():
    session = QKDSession(
        BB84,
        rng=random.Random(99),
        hacker_config=EavesdropperConfig(1.0, 0.0, 0.0),
    )
    session.generate(4000)
    session.measure(hacker_present=True)
    session.sift()
    assert 18.0 < session.get_state().error_rate < 32.0


def test_reset_clears_everything(session):
    session.generate(50)
    session.measure(hacker_present=True)
    session.sift()
    before = session.get_state()

    session.reset()

    after = session.get_state()
    assert after.phase is Phase.PREPARATION
    assert after.sender_bits == [] and after.receiver_bits == [] and after.intercepted_bits == []
    assert after.shared_key == ""
    assert after.error_rate == 0.0
    assert not after.hacker_present
    assert after.session_id != before.session_id


def test_get_state_is_idempotent(session):
    session.generate(20)
    session.measure(hacker_present=True)
    assert session.get_state() == session.get_state()
    assert session.phase is Phase.SIFTING


def test_snapshot_is_detached(session):
    session.generate(10)
    snapshot = session.get_state()
    snapshot.sender_bits.clear()
    snapshot.phase = Phase.COMPLETE
    state = session.get_state()
    assert len(state.sender_bits) == 10
    assert state.phase is Phase.TRANSMISSION


def test_configuration_does_not_touch_phase_or_bits(session):
    session.generate(10)
    before = session.get_state()
    session.configure_hacker(EavesdropperConfig(0.9, 0.2, 0.3))
    session.configure_noise(NoiseConfig(loss_probability=0.1))
    assert session.get_state() == before
    assert session.get_hacker_config() == EavesdropperConfig(0.9, 0.2, 0.3)
    assert session.get_noise_config() == NoiseConfig(loss_probability=0.1)


def test_configuration_applies_on_next_measure(session):
    session.generate(200)
    session.configure_noise(NoiseConfig(loss_probability=1.0))
    session.measure(hacker_present=True)
    state = session.get_state()
    assert state.intercepted_bits == []
    assert all(b.value == 0 and b.polarization == 0 for b in state.receiver_bits)


def test_out_of_order_calls_are_permitted(session):
    assert session.sift() == ""
    assert session.phase is Phase.ERROR_CHECK
    assert session.measure(hacker_present=False) == []
    assert session.phase is Phase.SIFTING


def test_rates_outside_unit_interval_are_accepted(session):
    session.configure_hacker(EavesdropperConfig(1.5, -0.2, 2.0))
    session.generate(20)
    session.measure(hacker_present=True)
    assert len(session.get_state().intercepted_bits) == 20


def test_listeners_receive_snapshots(session):
    phases = []
    unsubscribe = session.subscribe(lambda state: phases.append(state.phase))
    session.generate(5)
    session.measure(hacker_present=False)
    unsubscribe()
    session.sift()
    assert phases == [Phase.TRANSMISSION, Phase.SIFTING]


def test_bb84_ignores_drift():
    session = QKDSession(BB84, rng=random.Random(1), noise_config=NoiseConfig(polarization_drift=7))
    bits = session.generate(50)
    assert all(b.polarization == encode(b.basis, b.value) for b in bits)


def test_sarg04_applies_drift():
    session = QKDSession(SARG04, rng=random.Random(1), noise_config=NoiseConfig(polarization_drift=7))
    bits = session.generate(50)
    assert session.get_state().session_id.startswith("SARG04-")
    for i, bit in enumerate(bits):
        assert bit.polarization == (encode(bit.basis, bit.value) + 7 * i) % 180


def test_sarg04_survives_overflowing_drift():
    session = QKDSession(SARG04, rng=random.Random(1), noise_config=NoiseConfig(polarization_drift=1e308))
    bits = session.generate(3)
    assert len(bits) == 3
    assert all(0 <= b.polarization < 180 for b in bits)
    # 2e308 is no longer a finite angle
    assert bits[2].polarization == encode(bits[2].basis, bits[2].value)


def test_sarg04_nan_drift_is_ignored():
    session = QKDSession(SARG04, rng=random.Random(1), noise_config=NoiseConfig(polarization_drift=float("nan")))
    bits = session.generate(10)
    assert all(b.polarization == encode(b.basis, b.value) for b in bits)


def test_sarg04_sifts_on_basis_equality():
    session = QKDSession(SARG04, rng=random.Random(5))
    session.generate(80)
    session.measure(hacker_present=False)
    key = session.sift()
    state = session.get_state()
    assert len(key) == sum(1 for s, r in zip(state.sender_bits, state.receiver_bits) if s.basis == r.basis)


def test_sessions_are_independent():
    bb84 = QKDSession(BB84, rng=random.Random(1))
    sarg04 = QKDSession(SARG04, rng=random.Random(1))
    bb84.generate(10)
    assert sarg04.get_state().sender_bits == []
    assert sarg04.phase is Phase.PREPARATION


def test_make_protocol():
    assert make_protocol("BB84") is BB84
    assert make_protocol("sarg04") is SARG04
    with pytest.raises(UnknownProtocolError):
        make_protocol("e91")
