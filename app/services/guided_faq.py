"""Canned FAQ answers triggered by keywords.

Entries are checked top to bottom and the first match wins, so an entry with a
narrower predicate must sit above the broader entry that would also match it
(e.g. the English payment screen before the generic payment screen).
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from app.config import settings


def _contains_any(normalized: str, keywords: Iterable[str]) -> bool:
    return any(keyword in normalized for keyword in keywords)


PASSWORD_KEYWORDS = ["パスワード", "ぱすわーど", "password", "pass word", "暗証番号"]
PASSWORD_RESET_KEYWORDS = ["忘れ", "わすれ", "リセット", "再設定", "変更", "forgot", "forget", "reset", "change"]
PAYMENT_KEYWORDS = ["支払", "支払い画面", "決済", "購入画面", "お会計", "payment", "checkout"]
ENGLISH_KEYWORDS = ["英語", "english", "英文"]
POINT_KEYWORDS = ["ポイント", "point"]
POINT_USAGE_KEYWORDS = ["使い方", "使え", "つかえ", "貯め", "ためかた", "有効期限", "期限", "how to", "expire"]
REGISTRATION_KEYWORDS = ["会員登録", "新規登録", "アカウント作成", "登録方法", "sign up", "signup", "register"]
WITHDRAWAL_KEYWORDS = ["退会", "アカウント削除", "解約", "delete account", "unsubscribe"]
CONTACT_KEYWORDS = ["問い合わせ", "問合せ", "お問合せ", "連絡先", "営業時間", "contact"]


def mentions_password(normalized: str) -> bool:
    return _contains_any(normalized, PASSWORD_KEYWORDS)


def is_password_reset_question(normalized: str) -> bool:
    return mentions_password(normalized) and _contains_any(normalized, PASSWORD_RESET_KEYWORDS)


def is_payment_screen_english_question(normalized: str) -> bool:
    return _contains_any(normalized, PAYMENT_KEYWORDS) and _contains_any(normalized, ENGLISH_KEYWORDS)


def is_payment_screen_question(normalized: str) -> bool:
    return _contains_any(normalized, PAYMENT_KEYWORDS)


def is_point_usage_question(normalized: str) -> bool:
    return _contains_any(normalized, POINT_KEYWORDS) and _contains_any(normalized, POINT_USAGE_KEYWORDS)


def is_registration_question(normalized: str) -> bool:
    return _contains_any(normalized, REGISTRATION_KEYWORDS)


def is_withdrawal_question(normalized: str) -> bool:
    return _contains_any(normalized, WITHDRAWAL_KEYWORDS)


def is_contact_question(normalized: str) -> bool:
    return _contains_any(normalized, CONTACT_KEYWORDS)


@dataclass(frozen=True)
class GuidedAnswer:
    key: str
    predicate: Callable[[str], bool]
    response_text: str
    image_urls: list[str] = field(default_factory=list)

    def matches(self, normalized: str) -> bool:
        return self.predicate(normalized)


def _image_url(name: str, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.faq_image_base_url).rstrip("/")
    return f"{base}/{name}"


def build_guided_answers(image_base_url: Optional[str] = None) -> list[GuidedAnswer]:
    def images(*names: str) -> list[str]:
        return [_image_url(name, image_base_url) for name in names]

    return [
        GuidedAnswer(
            key="password_reset",
            predicate=is_password_reset_question,
            response_text=(
                "パスワードをお忘れの場合は、ログイン画面の「パスワードをお忘れですか？」から再設定できます。\n"
                "登録済みのメールアドレスに再設定用のリンクが届きます。手順は画像をご覧ください。"
            ),
            image_urls=images("password-reset-1.png", "password-reset-2.png", "password-reset-3.png"),
        ),
        GuidedAnswer(
            key="payment_screen_english",
            predicate=is_payment_screen_english_question,
            response_text=(
                "支払い画面が英語で表示される場合は、画面右上の言語メニューから「日本語」を選択してください。\n"
                "英語表示のままでも、画像の順番で操作すればお支払いを完了できます。"
            ),
            image_urls=images(
                "payment-english-1.png",
                "payment-english-2.png",
                "payment-english-3.png",
                "payment-english-4.png",
                "payment-english-5.png",
            ),
        ),
        GuidedAnswer(
            key="payment_screen",
            predicate=is_payment_screen_question,
            response_text="お支払い画面の操作方法です。画像の手順に沿ってお進みください。",
            image_urls=images("payment-1.png", "payment-2.png", "payment-3.png"),
        ),
        GuidedAnswer(
            key="point_usage",
            predicate=is_point_usage_question,
            response_text=(
                "ポイントはお支払い画面で「ポイントを使う」を選ぶとご利用いただけます。\n"
                "現在のポイント残高は「ログイン」後に「ポイント」と送信すると確認できます。"
            ),
            image_urls=images("points-1.png", "points-2.png"),
        ),
        GuidedAnswer(
            key="registration",
            predicate=is_registration_question,
            response_text="会員登録はトップページの「新規登録」から行えます。手順は画像をご覧ください。",
            image_urls=images("register-1.png", "register-2.png"),
        ),
        GuidedAnswer(
            key="withdrawal",
            predicate=is_withdrawal_question,
            response_text=(
                "退会はマイページの「アカウント設定」→「退会する」から手続きできます。\n"
                "退会すると保有ポイントは失効しますのでご注意ください。"
            ),
            image_urls=images("withdrawal-1.png"),
        ),
        GuidedAnswer(
            key="contact",
            predicate=is_contact_question,
            response_text=(
                "お問い合わせはサイト下部の「お問い合わせ」フォームから受け付けています。\n"
                "返信まで2営業日ほどお時間をいただく場合があります。"
            ),
        ),
    ]


GUIDED_ANSWERS = build_guided_answers()


def match_guided_answer(normalized: str, answers: Optional[list[GuidedAnswer]] = None) -> Optional[GuidedAnswer]:
    """Return the first entry whose predicate matches the normalized text."""
    if not normalized:
        return None
    for answer in answers if answers is not None else GUIDED_ANSWERS:
        if answer.matches(normalized):
            return answer
    return None


def get_guided_answer(key: str, answers: Optional[list[GuidedAnswer]] = None) -> Optional[GuidedAnswer]:
    for answer in answers if answers is not None else GUIDED_ANSWERS:
        if answer.key == key:
            return answer
    return None
