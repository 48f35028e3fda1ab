"""
Tests for the what-if cache, debouncer and session.
"""

import pytest

from decision_engine.config import WhatIfConfig
from decision_engine.engine.model import DecisionModel
from decision_engine.whatif.cache import FIFOCache
from decision_engine.whatif.debounce import DebounceState, Debouncer
from decision_engine.whatif.session import WhatIfSession, weights_key


class FakeClock:
    """Manually advanced monotonic clock."""
    
    def __init__(self, now=0.0):
        self.now = now
    
    def __call__(self):
        return self.now
    
    def advance(self, seconds):
        self.now += seconds


def make_model():
    """X (importance 4) and Y (importance 1); A wins on X, B on Y, C unrated."""
    model = DecisionModel(title="What-if test")
    x = model.add_criterion("X", importance=4)
    y = model.add_criterion("Y", importance=1)
    a = model.add_option("A")
    b = model.add_option("B")
    model.add_option("C")
    model.set_rating(a.id, x.id, 5)
    model.set_rating(a.id, y.id, 0)
    model.set_rating(b.id, x.id, 0)
    model.set_rating(b.id, y.id, 5)
    return model, x.id, y.id


class TestFIFOCache:
    """Tests for FIFOCache."""
    
    def test_evicts_oldest(self):
        cache = FIFOCache(capacity=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        
        assert "a" not in cache
        assert list(cache.keys()) == ["b", "c"]
    
    def test_reads_do_not_refresh(self):
        cache = FIFOCache(capacity=2)
        cache.put("a", 1)
        cache.put("b", 2)
        assert cache.get("a") == 1
        
        cache.put("c", 3)
        assert cache.get("a") is None
    
    def test_reinsert_keeps_slot(self):
        cache = FIFOCache(capacity=2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 10)
        cache.put("c", 3)
        
        assert list(cache.keys()) == ["b", "c"]
    
    def test_discard_and_clear(self):
        cache = FIFOCache()
        cache.put("a", 1)
        assert cache.discard("a")
        assert not cache.discard("a")
        
        cache.put("b", 2)
        cache.clear()
        assert len(cache) == 0
    
    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            FIFOCache(capacity=0)


class TestDebouncer:
    """Tests for the debounce state machine."""
    
    def test_waits_for_quiet_period(self):
        clock = FakeClock()
        debouncer = Debouncer(0.15, clock=clock)
        
        debouncer.trigger()
        assert debouncer.state is DebounceState.PENDING
        clock.advance(0.1)
        assert not debouncer.begin()
        
        clock.advance(0.06)
        assert debouncer.begin()
        assert debouncer.state is DebounceState.EVALUATING
        
        debouncer.finish()
        assert debouncer.state is DebounceState.IDLE
    
    def test_trigger_pushes_deadline_back(self):
        clock = FakeClock()
        debouncer = Debouncer(0.15, clock=clock)
        
        debouncer.trigger()
        clock.advance(0.1)
        debouncer.trigger()
        clock.advance(0.1)
        assert not debouncer.is_due()
        
        clock.advance(0.06)
        assert debouncer.is_due()
    
    def test_force_skips_wait(self):
        debouncer = Debouncer(0.15, clock=FakeClock())
        debouncer.trigger()
        assert debouncer.begin(force=True)
    
    def test_idle_never_begins(self):
        debouncer = Debouncer(0.15, clock=FakeClock())
        assert not debouncer.begin(force=True)
    
    def test_input_during_evaluation_stays_pending(self):
        clock = FakeClock()
        debouncer = Debouncer(0.15, clock=clock)
        debouncer.trigger()
        debouncer.begin(force=True)
        
        debouncer.trigger()
        debouncer.finish()
        
        assert debouncer.state is DebounceState.PENDING
    
    def test_cancel(self):
        debouncer = Debouncer(0.15, clock=FakeClock())
        debouncer.trigger()
        debouncer.cancel()
        
        assert debouncer.state is DebounceState.IDLE
        assert debouncer.deadline is None


class TestWhatIfSession:
    """Tests for WhatIfSession."""
    
    def test_baseline(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        assert session.state is DebounceState.IDLE
        assert session.raw_weights == session.committed_weights
        assert session.committed_weights[x] == pytest.approx(84.894259, abs=1e-6)
        assert model.get_option(session.baseline_winner_id).name == "A"
    
    def test_debounced_evaluation(self):
        model, x, y = make_model()
        clock = FakeClock()
        session = WhatIfSession(model, clock=clock)
        
        session.set_weight(x, 10)
        session.set_weight(y, 90)
        assert session.raw_weights[x] == 10
        assert session.state is DebounceState.PENDING
        assert session.poll() is None
        
        clock.advance(0.15)
        result = session.poll()
        
        assert result is not None
        assert session.state is DebounceState.IDLE
        assert result.weights[x] == pytest.approx(10.0)
        assert result.winner.option.name == "B"
        assert result.winner_changed
        assert result.differs_from_baseline
        assert [r.option.name for r in result.preview()] == ["B", "C", "A"]
    
    def test_committed_model_untouched(self):
        model, x, y = make_model()
        before_weights = model.normalized_weights()
        before_ratings = dict(model.ratings)
        
        session = WhatIfSession(model, clock=FakeClock())
        session.set_weight(x, 0)
        session.flush()
        
        assert model.normalized_weights() == before_weights
        assert model.ratings == before_ratings
    
    def test_winner_changed_tracks_previous_evaluation(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        session.set_weight(x, 10)
        session.set_weight(y, 90)
        assert session.flush().winner_changed
        
        session.set_weight(x, 5)
        second = session.flush()
        assert second.winner.option.name == "B"
        assert not second.winner_changed
    
    def test_cache_hit_returns_same_ranking(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        session.set_weight(x, 10)
        session.set_weight(y, 90)
        first = session.flush()
        
        session.set_weight(x, 20)
        session.flush()
        session.set_weight(x, 10)
        again = session.flush()
        
        assert not first.from_cache
        assert again.from_cache
        assert again.ranked is first.ranked
    
    def test_cache_is_bounded(self):
        model, x, y = make_model()
        session = WhatIfSession(model, config=WhatIfConfig(cache_capacity=3), clock=FakeClock())
        
        for value in range(1, 6):
            session.set_weight(x, value)
            session.flush()
        
        assert len(session.cache) == 3
    
    def test_all_zero_weights_split_equally(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        session.set_weight(x, 0)
        session.set_weight(y, 0)
        result = session.flush()
        
        assert result.weights == {x: pytest.approx(50.0), y: pytest.approx(50.0)}
        assert all(r.total_score == pytest.approx(2.5) for r in result.ranked)
    
    def test_invalid_weights(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        with pytest.raises(ValueError):
            session.set_weight(x, -1)
        with pytest.raises(KeyError):
            session.set_weight(999, 10)
    
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_weights(self, value):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        with pytest.raises(ValueError):
            session.set_weight(x, value)
        assert session.raw_weights == session.committed_weights
        assert not session.is_modified
    
    def test_reset(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        session.set_weight(x, 10)
        session.set_weight(y, 90)
        session.flush()
        abandoned = weights_key(session.raw_weights)
        session.set_weight(x, 30)
        
        session.reset()
        
        assert session.state is DebounceState.IDLE
        assert session.raw_weights == session.committed_weights
        assert not session.is_modified
        assert session.flush() is None
        # The abandoned vector was not the current one at reset time
        assert abandoned in session.cache
    
    def test_reset_discards_current_vector(self):
        model, x, y = make_model()
        session = WhatIfSession(model, clock=FakeClock())
        
        session.set_weight(x, 10)
        session.flush()
        current = weights_key(session.raw_weights)
        assert current in session.cache
        
        session.reset()
        assert current not in session.cache
    
    def test_evaluate_without_changes(self):
        model, _, _ = make_model()
        result = WhatIfSession(model, clock=FakeClock()).evaluate()
        
        assert result.winner.option.name == "A"
        assert not result.winner_changed
