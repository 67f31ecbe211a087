# tests/property/conftest.py
"""Shared Hypothesis strategies for chatmock property tests.

Usage:
    from tests.property.conftest import chat_messages, reply_texts

    @given(reply=reply_texts)
    def test_chunking(reply: str) -> None:
        ...
"""

from hypothesis import strategies as st

# Any text, including astral-plane characters and control characters.
# Surrogates are excluded because they can not be UTF-8 encoded.
reply_texts = st.text(alphabet=st.characters(exclude_categories=("Cs",)), max_size=300)

chunk_sizes = st.integers(min_value=1, max_value=12)

chat_messages = st.lists(
    st.fixed_dictionaries(
        {
            "role": st.sampled_from(["system", "user", "assistant"]),
            "content": reply_texts,
        }
    ),
    max_size=5,
)

model_names = st.text(alphabet=st.characters(exclude_categories=("Cs",)), max_size=40)
