from datetime import datetime

from loguru import logger

from wordbank.models.vocab import VocabularyItem
from wordbank.services.srs_sm2 import initial_progress
from wordbank.services.stores import ProgressStore, WordStore

STARTER_WORDS: tuple[VocabularyItem, ...] = (
    VocabularyItem(id="word_001", sourceText="alma", targetText="りんご"),
    VocabularyItem(id="word_002", sourceText="kutya", targetText="犬"),
    VocabularyItem(id="word_003", sourceText="ház", targetText="家"),
    VocabularyItem(id="word_004", sourceText="könyv", targetText="本"),
    VocabularyItem(id="word_005", sourceText="asztal", targetText="テーブル"),
    VocabularyItem(id="word_006", sourceText="szék", targetText="椅子"),
    VocabularyItem(id="word_007", sourceText="víz", targetText="水"),
    VocabularyItem(id="word_008", sourceText="kenyér", targetText="パン"),
    VocabularyItem(id="word_009", sourceText="autó", targetText="車"),
    VocabularyItem(id="word_010", sourceText="város", targetText="街"),
    VocabularyItem(id="word_011", sourceText="utca", targetText="通り"),
    VocabularyItem(id="word_012", sourceText="iskola", targetText="学校"),
    VocabularyItem(id="word_013", sourceText="tanuló", targetText="学生"),
    VocabularyItem(id="word_014", sourceText="tanár", targetText="先生"),
    VocabularyItem(id="word_015", sourceText="barát", targetText="友達"),
    VocabularyItem(id="word_016", sourceText="enni", targetText="食べる"),
    VocabularyItem(id="word_017", sourceText="inni", targetText="飲む"),
    VocabularyItem(id="word_018", sourceText="látni", targetText="見る"),
    VocabularyItem(id="word_019", sourceText="menni", targetText="行く"),
    VocabularyItem(id="word_020", sourceText="jönni", targetText="来る"),
)


def seed_starter_words(
    words: WordStore,
    progress: ProgressStore,
    now: datetime,
    starter: tuple[VocabularyItem, ...] = STARTER_WORDS,
) -> list[str]:
    """Add the built-in starter words to a learner's catalog.

    Starter words whose id or source text is already in the catalog are
    skipped and stored items are never overwritten. Returns the ids that were
    added and need a durable write.
    """
    added: list[str] = []
    for seed_item in starter:
        if seed_item.id in words or words.find_by_source_text(seed_item.sourceText) is not None:
            continue
        words.put(seed_item)
        progress.put(initial_progress(seed_item.id, now))
        added.append(seed_item.id)

    if added:
        logger.info("Seeded {} starter words", len(added))
    return added
