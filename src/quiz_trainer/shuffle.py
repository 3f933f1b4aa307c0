"""Per-session randomization of question order and answer options."""
import dataclasses
import logging
import random

from quiz_trainer.models import OPTION_LETTERS, Option, Question

logger = logging.getLogger(__name__)


def shuffle_questions(questions, rng: random.Random | None = None) -> list:
    shuffled = list(questions)
    (rng or random).shuffle(shuffled)
    return shuffled


def shuffle_options(question: Question, rng: random.Random | None = None) -> Question:
    """Return a copy of question with options permuted and relabeled a, b, c...

    The correct answer follows the option text. If the stored correct letter
    matches no option, or there are more options than letters, the question
    is returned unchanged.
    """
    if len(question.options) > len(OPTION_LETTERS):
        logger.warning("Too many options (%d) to relabel, leaving as is: %s",
                       len(question.options), question.question)
        return question
    correct = question.correct_option()
    if correct is None:
        logger.warning("Correct answer %r not among options of: %s",
                       question.correct_answer, question.question)
        return question

    shuffled = list(question.options)
    (rng or random).shuffle(shuffled)
    options = tuple(
        Option(letter=OPTION_LETTERS[i], text=opt.text) for i, opt in enumerate(shuffled)
    )
    new_correct = next(o.letter for o in options if o.text == correct.text)
    return dataclasses.replace(question, options=options, correct_answer=new_correct)
