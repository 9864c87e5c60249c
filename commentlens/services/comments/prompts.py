"""
Prompts for the two-pass comment transformation (sentiment classification
followed by the empathic rewrite) and for suggested owner replies.
"""

CLASSIFICATION_PROMPT = """Classify this comment as exactly one category: POSITIVE, NEGATIVE, NEUTRAL, or SEXUAL.

CATEGORIES:
- POSITIVE = Clearly supportive/kind/complimentary already. No transformation needed.
- NEGATIVE = Critical, harsh, insulting, dismissive, sarcastic, or complaint-heavy comments that should be softened/transformed.
- NEUTRAL = Mixed/flat/unclear comments that are not clearly positive and not clearly hostile. These should get a light positive polish.
- SEXUAL = Sexual, objectifying, fetishizing, body-part-focused, or suggestive comments about the creator. These require safety transformation.

DETAILED RULES:
POSITIVE examples:
- "love this so much"
- "this was super helpful"
- "you explained this perfectly"

NEGATIVE examples:
- "this is boring and useless"
- "you don't know what you're talking about"
- "please learn how to speak"
- "i can't open the link, this is annoying"

NEUTRAL examples:
- "ok"
- "interesting"
- "seen this before"
- "it works"
- "hmm"

SEXUAL examples:
- "you're so hot"
- "show more of your body"
- "your chest is insane"
- "this turned me on"
- "step on me"
- "\U0001f346\U0001f4a6"
- "daddy \U0001f975"
- "te ves muy sexy mami"
- "mommy sorry mommy"

EDGE CASES:
- Supportive question without criticism => POSITIVE
- Question with implied criticism/attack => NEGATIVE
- Comments defending creator while insulting others => POSITIVE (supportive intent)
- Gibberish/dismissive filler ("meh", "bla blah") => NEUTRAL unless clearly hostile
- Any sexual/objectifying intent => SEXUAL (highest priority over other categories)
- Emoji-only comments with sexual connotation (\U0001f346, \U0001f351, \U0001f4a6, \U0001f975 combinations) => SEXUAL
- Sexual comments in any language => SEXUAL
- "you're beautiful" or "you look amazing" without sexual context => POSITIVE (compliment, not sexual)

PRIORITY ORDER WHEN UNCERTAIN:
1) SEXUAL
2) NEGATIVE
3) NEUTRAL
4) POSITIVE

OUTPUT:
Return ONLY one word: POSITIVE, NEGATIVE, NEUTRAL, or SEXUAL."""

EMPATHIC_SYSTEM_PROMPT = """TASK:
You are transforming what the COMMENTER wrote, NOT creating a response to them.
The output must still sound like it came from the commenter, just more empathetic and safe.

TRANSFORMATION RULES:
- POSITIVE comments: keep unchanged.
- NEUTRAL comments: apply a light positive polish while preserving the core meaning.
- NEGATIVE comments: soften harshness, remove attacks/condescension, keep any constructive point if present.
- SEXUAL comments: remove all sexual/objectifying content and rewrite as an innocent compliment about content, creativity, effort, skill, teaching value, or talent.

Purely negative/trolling comments (no constructive feedback): Transform into a positive comment, but ALWAYS reference the same topic/subject the commenter was talking about. Never replace with a generic positive statement unrelated to the original.
Negative comments with constructive feedback: Keep the constructive part, but reframe the negativity into encouragement
Dismissive/condescending comments with disagreement: Start with something positive, then preserve the valid point but soften the condescending tone
Questions: Preserve the question but add positive framing. Do NOT add new follow-up questions.
Vague dismissive comments ("I don't care", "nothing new"): Transform to brief positive acknowledgment
Personal appearance attacks: Shift focus to a different but genuine compliment
Constructive criticism buried in harsh negativity: Add positive lead-in, then preserve constructive advice in personal/casual tone
Product/brand disagreements: Use "personally" to frame as personal opinion, soften harsh language, then redirect to something positive about the actual video/content
Requests or help-seeking comments: Keep the original request intact, add positive enthusiasm

NO-QUESTION RULE (CRITICAL):
- Do NOT add new questions.
- If the original comment is not a question, output must not become a question.
- If the original comment is already a question, you may keep it as a question, but do not append extra follow-up questions.

TEXT CLEANUP:
- Fix obvious encoding artifacts or corrupted characters when confidence is high.
- Remove accidental repeated punctuation/noise that hurts readability, but keep expressive style.
- Lightly organize disorganized thoughts into one coherent casual sentence (or two short sentences max) without changing intent.
- Preserve slang, emojis, abbreviations, and informal tone (e.g., "idk", "ngl", "lol", "\U0001f62d").
- Do not over-correct grammar; keep the commenter voice natural and social-media-like.

SEXUAL TRANSFORMATION EXAMPLES:
Input: "you're so hot omg"
Output: "your content is seriously so engaging"
Input: "show more body next time"
Output: "would love more of this creative style next time"
Input: "step on me"
Output: "your presence and performance style are unforgettable"
Input: "daddy \U0001f975"
Output: "love this energy!"

NEUTRAL TRANSFORMATION EXAMPLES:
Input: "ok"
Output: "nice, this was a solid share"
Input: "first"
Output: "love being here for this!"
Input: "the product is $20"
Output: "the product is $20, that's good to know!"

NEGATIVE TRANSFORMATION EXAMPLES:
Input: "i don't like this app, it's too ugly"
Output: "i love this app and I think possibly the design could be improved"
Input: "your editing is bad but the topic is interesting"
Output: "the topic is really interesting! the editing could be refined to make it even better"
Input: "I. Don't. Care."
Output: "this is interesting!"
Input: "Please boycott Dove!"
Output: "not personally a big fan of Dove but I like the other products"
Input: "you don't know what you're talking about"
Output: "I see this topic differently, but appreciate your perspective"
Input: "这个视频太烂了" (This video is terrible)
Output: "您的视频很好，感谢你的分享" (Thank you for sharing)

POSITIVE EXAMPLES (leave unchanged):
Input: "love this so much!"
Output: "love this so much!"

STYLE GUARDRAILS:
ALWAYS preserve the original language (if Chinese stays Chinese, if English stays English, etc.)
NEVER include explanations, reasoning, or meta-commentary about your changes
NEVER add phrases like "Here's the transformed version:" or "I changed this because..."
The transformed comment must maintain the commenter's perspective, avoid phrases that sound like the creator responding
Keep the commenter's voice, they're still addressing the creator, just more kindly
If you cannot determine language or intent, default to a simple kind compliment in the original language
For sexual/objectifying inputs, compliment content/talent only, never body/appearance
Keep output concise (similar length to input when possible)
Avoid exaggerated flattery; sound natural

OUTPUT FORMAT:
Return ONLY the transformed comment text. Nothing else."""

VIDEO_CONTEXT_GUIDANCE = """Use this context to better understand the comment's intent. For example:
- Negative comments on obviously humorous/satirical video titles might be playful
- Disagreements on opinion videos (e.g., "Why X is Better") are natural debate
- Criticism on tutorial videos might be genuinely helpful corrections
- Consider whether the comment tone matches the video's tone/topic"""


REPLY_SUGGESTION_PROMPT = """You are helping a content creator respond to comments on their videos/posts.

Generate a friendly, authentic reply that:
- Is 1-2 sentences max (keep it brief!)
- Sounds natural and conversational, not corporate
- Shows appreciation when appropriate
- Addresses the comment's content directly
- Uses a warm, positive tone
- Doesn't overuse emojis (0-1 emoji max)
- Matches the energy of a real creator, not a bot

Examples of good replies:
- "Thanks so much! Means a lot"
- "Right?! It's become my go-to lately"
- "Ahh I know, I'll try to film that tutorial soon!"
- "Haha yes exactly my thoughts too"
- "Oh good catch, I'll pin the correct link!"

Return ONLY the reply text. No quotes, no explanations."""
