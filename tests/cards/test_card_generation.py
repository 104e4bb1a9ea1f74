"""Bounded context: Card Generation

Business rules for building reproducible bingo cards from a song pool.
"""

import pytest

from src.domain.errors import InsufficientSongsError
from src.domain.model import FREE_SPACE, CardOptions
from src.domain.seeded_rng import generate_seed, seeded_random, seeded_shuffle
from src.services.card_generator import CardGenerator


@pytest.fixture
def generator():
    return CardGenerator()


class TestSeededRandomness:
    """Card layouts depend only on the seed, never on ambient randomness."""

    def test_seeded_random_is_a_pure_function(self):
        assert seeded_random("abc", 7) == seeded_random("abc", 7)

    def test_seeded_random_stays_in_unit_interval(self):
        values = [seeded_random("range", i) for i in range(500)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_different_indexes_give_different_values(self):
        assert len({seeded_random("abc", i) for i in range(50)}) == 50

    def test_shuffle_is_a_permutation_and_leaves_input_untouched(self):
        items = list(range(20))
        shuffled = seeded_shuffle(items, "perm")

        assert items == list(range(20))
        assert sorted(shuffled) == items

    def test_shuffle_is_reproducible(self):
        assert seeded_shuffle(range(30), "same") == seeded_shuffle(range(30), "same")

    def test_generated_seeds_are_printable_and_distinct(self):
        seeds = {generate_seed() for _ in range(20)}
        assert len(seeds) == 20
        assert all(seed.isprintable() and seed.startswith("CARD-") for seed in seeds)


class TestGenerateSingleCard:
    """As a host, I print a card that always looks the same for a given seed."""

    def test_three_by_five_card_uses_fifteen_distinct_songs(self, generator, songs15):
        card = generator.generate_card(songs15, CardOptions(seed="abc"))

        ids = card.song_ids()
        assert len(card.grid) == 3
        assert all(len(row) == 5 for row in card.grid)
        assert len(ids) == 15
        assert len(set(ids)) == 15
        assert set(ids) == {f"s{i}" for i in range(1, 16)}
        assert all(cell is not FREE_SPACE for row in card.grid for cell in row)

    def test_same_seed_gives_same_grid(self, generator, songs15):
        first = generator.generate_card(songs15, CardOptions(seed="abc"))
        second = generator.generate_card(songs15, CardOptions(seed="abc"))

        assert first.grid == second.grid
        assert first.seed == second.seed == "abc"

    def test_each_card_gets_its_own_id(self, generator, songs15):
        first = generator.generate_card(songs15, CardOptions(seed="abc"))
        second = generator.generate_card(songs15, CardOptions(seed="abc"))

        assert first.id != second.id

    def test_different_seeds_give_different_grids(self, generator, songs15):
        first = generator.generate_card(songs15, CardOptions(seed="abc"))
        second = generator.generate_card(songs15, CardOptions(seed="abd"))

        assert first.grid != second.grid

    def test_seed_is_generated_when_omitted(self, generator, songs15):
        card = generator.generate_card(songs15)

        assert card.seed
        assert card.layout == "3x5"

    def test_input_pool_is_not_modified(self, generator, songs15):
        before = list(songs15)
        generator.generate_card(songs15, CardOptions(seed="abc"))

        assert songs15 == before

    def test_larger_pool_uses_only_needed_songs(self, generator, songs24):
        card = generator.generate_card(songs24, CardOptions(seed="abc"))

        assert len(set(card.song_ids())) == 15


class TestPoolValidation:
    """Cards are never generated from a pool that cannot fill them."""

    def test_fourteen_songs_is_not_enough_for_three_by_five(self, generator, songs15):
        with pytest.raises(InsufficientSongsError) as exc_info:
            generator.generate_card(songs15[:14], CardOptions(seed="abc"))

        assert exc_info.value.required == 15
        assert exc_info.value.available == 14

    def test_twenty_three_songs_is_not_enough_for_five_by_five(self, generator, songs24):
        with pytest.raises(InsufficientSongsError) as exc_info:
            generator.generate_card(songs24[:23], CardOptions(seed="abc", layout="5x5"))

        assert exc_info.value.required == 24

    def test_duplicate_song_ids_are_rejected(self, generator, songs15, song_factory):
        pool = songs15 + [song_factory(1, title="Another take")]

        with pytest.raises(ValueError, match="Duplicate song id"):
            generator.generate_card(pool, CardOptions(seed="abc"))

    def test_unknown_layout_is_rejected(self, generator, songs15):
        with pytest.raises(ValueError, match="Unknown card layout"):
            generator.generate_card(songs15, CardOptions(seed="abc", layout="4x4"))

    def test_batch_count_must_be_positive(self, generator, songs15):
        with pytest.raises(ValueError):
            generator.generate_cards(songs15, 0)

    def test_insufficient_pool_is_reported_before_any_card_is_built(self, generator, songs15):
        with pytest.raises(InsufficientSongsError):
            generator.generate_cards(songs15[:10], 5, CardOptions(base_seed="X"))


class TestFiveByFiveLayout:
    """The classic bingo layout keeps a free centre square."""

    def test_centre_cell_is_free(self, generator, songs24):
        card = generator.generate_card(songs24, CardOptions(seed="abc", layout="5x5"))

        assert card.grid[2][2] is FREE_SPACE
        assert card.is_free_space(2, 2)
        assert card.song_at(2, 2) is None

    def test_every_other_cell_holds_a_distinct_song(self, generator, songs24):
        card = generator.generate_card(songs24, CardOptions(seed="abc", layout="5x5"))

        free_cells = [(r, c) for r, row in enumerate(card.grid) for c, cell in enumerate(row) if cell is FREE_SPACE]
        assert free_cells == [(2, 2)]
        assert len(set(card.song_ids())) == 24


class TestBatchGeneration:
    """A whole print run can be reproduced from one base seed."""

    def test_base_seed_derives_indexed_seeds(self, generator, songs24):
        cards = generator.generate_cards(songs24, 3, CardOptions(base_seed="X"))

        assert [card.seed for card in cards] == ["X_0", "X_1", "X_2"]

    def test_batch_is_reproducible(self, generator, songs24):
        first = generator.generate_cards(songs24, 4, CardOptions(base_seed="party"))
        second = generator.generate_cards(songs24, 4, CardOptions(base_seed="party"))

        assert [c.grid for c in first] == [c.grid for c in second]

    def test_batch_card_matches_single_card_with_same_seed(self, generator, songs24):
        batch = generator.generate_cards(songs24, 2, CardOptions(base_seed="X"))
        single = generator.generate_card(songs24, CardOptions(seed="X_1"))

        assert batch[1].grid == single.grid

    def test_cards_in_a_batch_differ(self, generator, songs24):
        cards = generator.generate_cards(songs24, 5, CardOptions(base_seed="X"))

        assert len({card.grid for card in cards}) == 5

    def test_without_base_seed_each_card_gets_a_fresh_seed(self, generator, songs24):
        cards = generator.generate_cards(songs24, 3)

        assert len({card.seed for card in cards}) == 3


class TestDuplicateArtistAvoidance:
    """Hosts can ask that no row repeats an artist."""

    @pytest.fixture
    def five_artists(self, song_factory):
        return [song_factory(i, artist=f"Band {i % 5}") for i in range(1, 16)]

    @pytest.mark.parametrize("seed", ["abc", "def", "ghi", "jkl", "mno"])
    def test_rows_have_distinct_artists_when_pool_allows(self, generator, five_artists, seed):
        card = generator.generate_card(five_artists, CardOptions(seed=seed, prevent_duplicate_artist=True))
        by_id = {s.id: s.artist for s in five_artists}

        for row in card.grid:
            artists = [by_id[cell] for cell in row]
            assert len(set(artists)) == len(artists)

    def test_artist_comparison_ignores_case_and_spacing(self, generator, song_factory):
        pool = [song_factory(i, artist=("Queen" if i % 2 else " queen ")) for i in range(1, 16)]
        pool += [song_factory(i, artist=f"Solo {i}") for i in range(16, 31)]

        card = generator.generate_card(pool, CardOptions(seed="case", prevent_duplicate_artist=True))
        by_id = {s.id: s.artist.strip().lower() for s in pool}

        for row in card.grid:
            assert sum(1 for cell in row if by_id[cell] == "queen") <= 1

    def test_single_artist_pool_still_produces_a_full_card(self, generator, song_factory):
        pool = [song_factory(i, artist="Same Band") for i in range(1, 16)]

        card = generator.generate_card(pool, CardOptions(seed="abc", prevent_duplicate_artist=True))

        assert len(set(card.song_ids())) == 15

    def test_option_off_keeps_plain_shuffle_order(self, generator, five_artists):
        plain = generator.generate_card(five_artists, CardOptions(seed="abc"))
        shuffled_ids = [s.id for s in seeded_shuffle(five_artists, "abc")]

        assert plain.song_ids() == shuffled_ids
