import pytest

from app.services.guided_faq import (
    GUIDED_ANSWERS,
    build_guided_answers,
    get_guided_answer,
    is_password_reset_question,
    match_guided_answer,
    mentions_password,
)
from app.services.intent_service import normalize_for_matching


def _match_key(text: str):
    answer = match_guided_answer(normalize_for_matching(text))
    return answer.key if answer else None


class TestEntries:
    @pytest.mark.parametrize(
        "text, key",
        [
            ("パスワードを忘れました", "password_reset"),
            ("Forgot my password", "password_reset"),
            ("パスワードを再設定したい", "password_reset"),
            ("支払い画面が英語になっています", "payment_screen_english"),
            ("Payment page is in English", "payment_screen_english"),
            ("支払い画面の使い方を教えて", "payment_screen"),
            ("決済ができません", "payment_screen"),
            ("ポイントの使い方は？", "point_usage"),
            ("ポイントの有効期限", "point_usage"),
            ("会員登録のやり方", "registration"),
            ("退会したいです", "withdrawal"),
            ("問い合わせ先を教えて", "contact"),
        ],
    )
    def test_each_entry_matches_its_topic(self, text, key):
        assert _match_key(text) == key

    def test_unrelated_text_does_not_match(self):
        assert _match_key("今日はいい天気ですね") is None

    def test_empty_text_does_not_match(self):
        assert match_guided_answer("") is None


class TestPriority:
    def test_english_payment_resolves_to_specific_entry(self):
        text = normalize_for_matching("決済画面 英語")
        assert match_guided_answer(text).key == "payment_screen_english"

    def test_specific_entry_is_ordered_before_general(self):
        keys = [answer.key for answer in GUIDED_ANSWERS]
        assert keys.index("payment_screen_english") < keys.index("payment_screen")

    def test_password_reset_is_first(self):
        assert GUIDED_ANSWERS[0].key == "password_reset"

    def test_keys_are_unique(self):
        keys = [answer.key for answer in GUIDED_ANSWERS]
        assert len(keys) == len(set(keys))


class TestPasswordPredicates:
    def test_mentions_password(self):
        assert mentions_password("パスワードって何文字？") is True
        assert mentions_password("ポイント") is False

    def test_password_mention_without_reset_is_not_reset_question(self):
        assert is_password_reset_question("パスワードって何文字？") is False


class TestImages:
    def test_image_urls_use_base_url(self):
        answers = build_guided_answers("https://cdn.example.com/faq/")
        payment = get_guided_answer("payment_screen", answers)

        assert payment.image_urls
        assert all(url.startswith("https://cdn.example.com/faq/") for url in payment.image_urls)
        assert all("//" not in url.split("://", 1)[1] for url in payment.image_urls)

    def test_english_payment_has_more_images_than_one_batch_of_text_and_images(self):
        answer = get_guided_answer("payment_screen_english")
        assert len(answer.image_urls) + 1 > 5

    def test_unknown_key_returns_none(self):
        assert get_guided_answer("nope") is None
