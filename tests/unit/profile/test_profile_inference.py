"""Tests for ProfileInferenceEngine and profile merging."""

import random

import pytest
import pytest_asyncio

from atelier.config.models.generation import GeneratorModelConfig
from atelier.errors import NotFoundError, UpstreamError
from atelier.profile.enums import AgeGroup, Gender, ProfileField
from atelier.profile.inference import (
    ProfileInferenceEngine,
    age_group_for,
    detect_stated_age_group,
    detect_stated_gender,
    merge_age_group,
    merge_gender,
)
from atelier.profile.models import User
from atelier.profile.stores.inmemory import InMemoryUserStore
from atelier.prompts.repository import FilePromptRepository
from atelier.providers.llm import MockModelProvider, StructuredOutputInvoker


@pytest_asyncio.fixture
async def stored_user(user_store: InMemoryUserStore) -> User:
    return await user_store.upsert_by_external_id("15551230000", "Sam")


@pytest.fixture
def engine(
    invoker: StructuredOutputInvoker,
    user_store: InMemoryUserStore,
    prompts: FilePromptRepository,
    model_config: GeneratorModelConfig,
) -> ProfileInferenceEngine:
    return ProfileInferenceEngine(invoker, user_store, prompts, model_config)


class TestDetectStatedGender:
    """Tests for deterministic phrase detection."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("I'm a woman", Gender.FEMALE),
            ("i am female btw", Gender.FEMALE),
            ("Im a guy looking for shoes", Gender.MALE),
            ("I am a man", Gender.MALE),
            ("my wife is a woman of taste", None),
            ("", None),
        ],
    )
    def test_phrases(self, text: str, expected: Gender | None) -> None:
        """Should detect explicit first-person statements only."""
        assert detect_stated_gender(text) == expected

    def test_button_payload(self) -> None:
        """Should read the gender quick-reply payload."""
        assert detect_stated_gender("", "gender:male") == Gender.MALE
        assert detect_stated_gender("", "gender:unknown") is None


class TestMergeGender:
    """Tests for merge_gender."""

    def test_confirmed_replaces_inferred(self) -> None:
        """Should store a confirmation and clear the guess."""
        user = User(external_id="x", inferred_gender=Gender.MALE)
        assert merge_gender(user, Gender.FEMALE, confirmed=True)
        assert user.confirmed_gender == Gender.FEMALE
        assert user.inferred_gender is None

    def test_inference_never_overwrites_confirmed(self) -> None:
        """Should ignore an unconfirmed observation once confirmed."""
        user = User(external_id="x", confirmed_gender=Gender.FEMALE)
        assert merge_gender(user, Gender.MALE, confirmed=False) is False
        assert user.confirmed_gender == Gender.FEMALE
        assert user.inferred_gender is None

    def test_random_sequences_keep_last_confirmation(self) -> None:
        """Should always end with the last confirmed value, whatever follows it."""
        rng = random.Random(7)
        for _ in range(200):
            user = User(external_id="x")
            last_confirmed = None
            for _ in range(rng.randint(1, 8)):
                gender = rng.choice([Gender.MALE, Gender.FEMALE, None])
                confirmed = rng.random() < 0.4
                merge_gender(user, gender, confirmed)
                if confirmed and gender is not None:
                    last_confirmed = gender
            assert user.confirmed_gender == last_confirmed
            if last_confirmed is not None:
                assert user.gender == last_confirmed


class TestDetectStatedAgeGroup:
    """Tests for deterministic age detection."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("I'm 34", AgeGroup.AGE_26_35),
            ("i am 19 years old", AgeGroup.AGE_18_25),
            ("im 16 y/o, what should I wear?", AgeGroup.AGE_13_17),
            ("I am 55.", AgeGroup.AGE_46_55),
            ("I'm 62 and retired", None),
            ("I'm 62 years old and retired", AgeGroup.AGE_55_PLUS),
            ("I'm 5 foot 2", None),
            ("my son is 12", None),
            ("", None),
        ],
    )
    def test_phrases(self, text: str, expected: AgeGroup | None) -> None:
        """Should detect a first-person age and bracket it."""
        assert detect_stated_age_group(text) == expected

    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (12, None),
            (13, AgeGroup.AGE_13_17),
            (25, AgeGroup.AGE_18_25),
            (26, AgeGroup.AGE_26_35),
            (45, AgeGroup.AGE_36_45),
            (56, AgeGroup.AGE_55_PLUS),
        ],
    )
    def test_bracket_edges(self, age: int, expected: AgeGroup | None) -> None:
        """Should place boundary ages in the right bracket."""
        assert age_group_for(age) == expected


class TestMergeAgeGroup:
    """Tests for merge_age_group."""

    def test_inference_fills_only_unconfirmed(self) -> None:
        """Should keep a confirmed age group over any later guess."""
        user = User(external_id="x")
        assert merge_age_group(user, AgeGroup.AGE_26_35, confirmed=False)
        assert user.inferred_age_group == AgeGroup.AGE_26_35

        assert merge_age_group(user, AgeGroup.AGE_36_45, confirmed=True)
        assert user.confirmed_age_group == AgeGroup.AGE_36_45
        assert user.inferred_age_group is None

        assert merge_age_group(user, AgeGroup.AGE_18_25, confirmed=False) is False
        assert user.age_group == AgeGroup.AGE_36_45


class TestProfileInferenceEngine:
    """Tests for infer_profile."""

    @pytest.mark.asyncio
    async def test_stated_gender_saved_as_confirmed(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        user_store: InMemoryUserStore,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should persist an explicit statement without a model call."""
        user = await engine.infer_profile(make_context(text="I'm a woman", user=stored_user))

        assert user.confirmed_gender == Gender.FEMALE
        assert (await user_store.get(stored_user.id)).confirmed_gender == Gender.FEMALE
        assert mock_provider.call_history == []

    @pytest.mark.asyncio
    async def test_statement_upgrades_inferred(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should turn an inferred gender into a confirmed one when stated."""
        stored_user.inferred_gender = Gender.FEMALE
        user = await engine.infer_profile(make_context(text="I am female", user=stored_user))

        assert user.confirmed_gender == Gender.FEMALE
        assert user.inferred_gender is None

    @pytest.mark.asyncio
    async def test_known_gender_short_circuits(
        self,
        engine: ProfileInferenceEngine,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should skip the model when the user already has a gender."""
        user = User(external_id="x", inferred_gender=Gender.MALE)
        result = await engine.infer_profile(make_context(text="what shoes?", user=user))

        assert result.gender == Gender.MALE
        assert mock_provider.call_history == []

    @pytest.mark.asyncio
    async def test_empty_transcript_skips_model(
        self,
        engine: ProfileInferenceEngine,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should not ask the model with nothing to read."""
        result = await engine.infer_profile(make_context(text=""))

        assert result.gender is None
        assert mock_provider.call_history == []

    @pytest.mark.asyncio
    async def test_model_inference_saved(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        user_store: InMemoryUserStore,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should store an unconfirmed model guess as inferred."""
        mock_provider.set_response(
            "profile_inference", {"inferred_gender": "male", "confirmed": False}
        )
        user = await engine.infer_profile(
            make_context(text="need a tie for my suit", user=stored_user)
        )

        assert user.inferred_gender == Gender.MALE
        assert user.confirmed_gender is None
        assert (await user_store.get(stored_user.id)).inferred_gender == Gender.MALE

    @pytest.mark.asyncio
    async def test_model_confirmation_saved(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should store a model-reported confirmation as confirmed."""
        mock_provider.set_response(
            "profile_inference", {"inferred_gender": "female", "confirmed": True}
        )
        user = await engine.infer_profile(
            make_context(text="as a woman I prefer flats", user=stored_user)
        )

        assert user.confirmed_gender == Gender.FEMALE

    @pytest.mark.asyncio
    async def test_model_age_group_saved_as_inferred(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        user_store: InMemoryUserStore,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should store the age group the model reports alongside gender."""
        mock_provider.set_response(
            "profile_inference",
            {"inferred_gender": "female", "confirmed": False, "inferred_age_group": "18-25"},
        )
        user = await engine.infer_profile(
            make_context(text="outfit for my college formal", user=stored_user)
        )

        stored = await user_store.get(stored_user.id)
        assert stored.inferred_age_group == AgeGroup.AGE_18_25
        assert stored.confirmed_age_group is None
        assert user.missing_fields(frozenset(ProfileField)) == set()

    @pytest.mark.asyncio
    async def test_stated_age_saved_as_confirmed(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        user_store: InMemoryUserStore,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should confirm a stated age even when the gender is already known."""
        stored_user.confirmed_gender = Gender.MALE
        stored_user.inferred_age_group = AgeGroup.AGE_18_25
        await user_store.save(stored_user)

        user = await engine.infer_profile(make_context(text="I'm 40.", user=stored_user))

        assert user.confirmed_age_group == AgeGroup.AGE_36_45
        assert user.inferred_age_group is None
        assert (await user_store.get(stored_user.id)).age_group == AgeGroup.AGE_36_45
        assert mock_provider.call_history == []

    @pytest.mark.asyncio
    async def test_stated_age_kept_when_model_fails(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        user_store: InMemoryUserStore,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should still save a stated age when gender inference fails."""
        mock_provider.set_response("profile_inference", UpstreamError("provider down"))
        await engine.infer_profile(make_context(text="i am 30 years old", user=stored_user))

        stored = await user_store.get(stored_user.id)
        assert stored.confirmed_age_group == AgeGroup.AGE_26_35
        assert stored.gender is None

    @pytest.mark.asyncio
    async def test_null_inference_leaves_user(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        mock_provider: MockModelProvider,
        make_context,
    ) -> None:
        """Should keep the field missing when the model cannot tell."""
        mock_provider.set_response(
            "profile_inference", {"inferred_gender": None, "confirmed": False}
        )
        user = await engine.infer_profile(make_context(text="hello", user=stored_user))

        assert user.missing_fields(frozenset({ProfileField.GENDER})) == {ProfileField.GENDER}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        ["not json", {"confirmed": True}, UpstreamError("provider down")],
    )
    async def test_failures_are_not_fatal(
        self,
        engine: ProfileInferenceEngine,
        stored_user: User,
        mock_provider: MockModelProvider,
        make_context,
        payload,
    ) -> None:
        """Should return the user unchanged when the model call fails."""
        mock_provider.set_response("profile_inference", payload)
        user = await engine.infer_profile(make_context(text="hello", user=stored_user))

        assert user.gender is None

    @pytest.mark.asyncio
    async def test_save_failure_propagates(
        self, engine: ProfileInferenceEngine, make_context
    ) -> None:
        """Should propagate store failures."""
        stranger = User(external_id="not-stored")
        with pytest.raises(NotFoundError):
            await engine.infer_profile(make_context(text="I'm a man", user=stranger))


class TestUserModel:
    """Tests for User profile helpers."""

    def test_confirmed_preferred(self) -> None:
        """Should prefer the confirmed value."""
        user = User(
            external_id="x", confirmed_gender=Gender.FEMALE, inferred_gender=Gender.MALE
        )
        assert user.gender == Gender.FEMALE

    def test_missing_fields(self) -> None:
        """Should list required fields without a value."""
        user = User(external_id="x", inferred_gender=Gender.MALE)
        required = frozenset({ProfileField.GENDER, ProfileField.AGE_GROUP})
        assert user.missing_fields(required) == {ProfileField.AGE_GROUP}
