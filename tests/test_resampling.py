"""Tests for k-fold cross-validation."""

import pytest

from metre_inference.inference import EvaluationReport, InferenceConfig, SequenceEvaluation, evaluate, make_folds


class TestMakeFolds:
    def test_partition(self):
        folds = make_folds(10, 3, seed=1)
        assert len(folds) == 3
        assert sorted(i for fold in folds for i in fold) == list(range(10))
        assert sorted(len(fold) for fold in folds) == [3, 3, 4]

    def test_seeded_partition_is_reproducible(self):
        assert make_folds(20, 4, seed=7) == make_folds(20, 4, seed=7)

    @pytest.mark.parametrize("n_items,k", [(5, 0), (3, 4)])
    def test_invalid_fold_count(self, n_items, k):
        with pytest.raises(ValueError):
            make_folds(n_items, k)


class TestEvaluationReport:
    def test_accuracy_ignores_unknown_metre(self):
        report = EvaluationReport(
            k=2,
            items=[
                SequenceEvaluation(0, 0, 4, "96/4", "96/4", 1.0),
                SequenceEvaluation(1, 1, 4, "72/3", "96/4", 3.0),
                SequenceEvaluation(2, 1, 0, None, "96/4", None),
            ],
        )
        assert report.accuracy == pytest.approx(0.5)
        assert report.mean_information_content == pytest.approx(2.0)
        assert report.items[2].correct is None

    def test_empty_report(self):
        report = EvaluationReport(k=2)
        assert report.accuracy is None
        assert report.mean_information_content is None


class TestEvaluate:
    """Cross-validation over the mixed corpus."""

    def test_every_sequence_evaluated_once(self, mixed_corpus):
        report = evaluate(mixed_corpus, InferenceConfig(resolution=4), k=3, seed=0)

        assert [item.index for item in report.items] == list(range(len(mixed_corpus)))
        assert {item.fold for item in report.items} <= {0, 1, 2}
        assert all(item.n_events == len(mixed_corpus[item.index]) for item in report.items)
        assert 0.0 <= report.accuracy <= 1.0

    def test_true_category_from_last_event(self, mixed_corpus):
        report = evaluate(mixed_corpus, InferenceConfig(resolution=4), k=2, seed=3)
        assert [item.true_category for item in report.items] == ["96/4", "72/3"] * 3

    def test_seed_makes_runs_reproducible(self, mixed_corpus):
        config = InferenceConfig(resolution=4)
        first = evaluate(mixed_corpus, config, k=2, seed=5)
        second = evaluate(mixed_corpus, config, k=2, seed=5)
        assert first.to_dict() == second.to_dict()

    def test_base_config_is_unchanged(self, mixed_corpus):
        config = InferenceConfig(resolution=4)
        evaluate(mixed_corpus, config, k=2, seed=0)
        assert config.resampling_fold is None
        assert config.resampling_count is None

    def test_needs_two_folds(self, mixed_corpus):
        with pytest.raises(ValueError):
            evaluate(mixed_corpus, k=1)
