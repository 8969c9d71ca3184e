"""Community reviews - Reddit discussions about a place, summarised by the LLM"""
import logging
import re

import requests
from django.core.cache import cache
from openai import OpenAIError

from ..utils import llm
from ..utils.cache_keys import CacheKeys
from ..utils.constants import CommunityRules

logger = logging.getLogger(__name__)

REDDIT_SEARCH_URL = 'https://old.reddit.com/r/{subreddit}/search.json'
REDDIT_HEADERS = {'User-Agent': 'Mozilla/5.0 (StudentHousingBot)'}

KNOWN_CITIES = ['hyderabad', 'bangalore', 'bengaluru', 'mumbai', 'delhi', 'pune', 'chennai', 'kolkata']
GENERIC_WORDS = {
    'hostel', 'pg', 'hotel', 'building', 'towers', 'heights', 'residency', 'stadium', 'college', 'school', 'mall',
}
DIRECTION_WORDS = re.compile(r'\b(near|behind|opp|opposite|beside)\b', re.IGNORECASE)
REMOVED_BODIES = ('[removed]', '[deleted]')

CATEGORY_KEYWORDS = [
    (('stadium', 'ground'), ['sports', 'match', 'cricket', 'football', 'arena']),
    (('hostel', 'pg', 'residency'), ['stay', 'food', 'rent', 'room', 'owner']),
    (('mall',), ['shopping', 'theatre', 'movie', 'parking']),
    (('college', 'institute'), ['campus', 'faculty', 'placement', 'fest']),
    (('hospital',), ['doctor', 'treatment', 'emergency']),
]

SUMMARY_PROMPT = """Analyze these Reddit posts about "{name}" ({categories}).
Strictly ignore posts that are clearly about something else (even if they share a keyword).

Data:
{posts}

Return JSON:
{{
  "summary": "Concise summary of user opinions.",
  "sentiment": "positive/negative/mixed",
  "safety_rating": "High/Medium/Low",
  "verdict": "One sentence verdict.",
  "pros": [],
  "cons": []
}}"""


class SearchContext:
    def __init__(self, raw_input, name_tokens, locality, city, category_keywords):
        self.raw_input = raw_input
        self.name_tokens = name_tokens
        self.locality = locality
        self.city = city
        self.category_keywords = category_keywords


def infer_category_keywords(name):
    lowered = name.lower()
    for needles, keywords in CATEGORY_KEYWORDS:
        if any(needle in lowered for needle in needles):
            return keywords
    return []


def parse_search_context(location_name, address=''):
    clean_name = DIRECTION_WORDS.sub(' ', location_name).strip()
    full = f'{location_name} {address}'.lower()
    city = next((c for c in KNOWN_CITIES if c in full), '')

    name_tokens = [t for t in re.split(r'[\s,]+', clean_name.lower()) if len(t) > 2]
    locality = next((t for t in name_tokens if t not in GENERIC_WORDS and t != city), '')

    return SearchContext(
        raw_input=location_name,
        name_tokens=name_tokens,
        locality=locality,
        city=city or 'india',
        category_keywords=infer_category_keywords(clean_name),
    )


def relevance_score(post, context):
    title = (post.get('title') or '').lower()
    body = post.get('selftext') or ''
    content = f'{title} {body.lower()}'

    score = sum(CommunityRules.NAME_TOKEN_SCORE for t in context.name_tokens if t in content)
    score += sum(CommunityRules.CATEGORY_SCORE for k in context.category_keywords if k in content)
    if body in REMOVED_BODIES:
        score -= CommunityRules.REMOVED_PENALTY
    score += sum(CommunityRules.TITLE_TOKEN_SCORE for t in context.name_tokens if t in title)
    return score


def search_queries(context):
    queries = [f'"{context.raw_input}"', ' '.join(context.name_tokens)]
    if context.category_keywords:
        queries.append(f'{context.locality} {context.category_keywords[0]}'.strip())
    unique = []
    for query in queries:
        if len(query) > 2 and query not in unique:
            unique.append(query)
    return unique


def search_subreddits(context):
    subs = []
    for sub in [context.city, 'india', 'hyderabad', 'bangalore']:
        if sub and sub not in subs:
            subs.append(sub)
    return subs[:2]


class CommunityReviewService:
    def __init__(self, session=None):
        self.session = session or requests.Session()

    def fetch_posts(self, context):
        posts = {}
        for query in search_queries(context):
            for subreddit in search_subreddits(context):
                try:
                    response = self.session.get(
                        REDDIT_SEARCH_URL.format(subreddit=subreddit),
                        params={'q': query, 'restrict_sr': 1, 'sort': 'relevance', 'limit': 10},
                        headers=REDDIT_HEADERS,
                        timeout=10,
                    )
                    response.raise_for_status()
                    children = response.json().get('data', {}).get('children', [])
                except (requests.exceptions.RequestException, ValueError) as e:
                    logger.info(f'[COMMUNITY] Reddit search r/{subreddit} "{query}" failed: {e}')
                    continue

                for child in children:
                    post = child.get('data') or {}
                    score = relevance_score(post, context)
                    if score < CommunityRules.MIN_RELEVANCE:
                        continue
                    url = f'https://reddit.com{post.get("permalink", "")}'
                    posts[url] = {
                        'title': post.get('title', ''),
                        'body': post.get('selftext', ''),
                        'url': url,
                        'score': post.get('score', 0),
                        'created': post.get('created_utc'),
                        'subreddit': post.get('subreddit', subreddit),
                        'relevance_score': score,
                        'relevance_type': (
                            'specific_building' if score > CommunityRules.SPECIFIC_BUILDING_THRESHOLD
                            else 'neighborhood_context'
                        ),
                    }

        ranked = sorted(posts.values(), key=lambda p: p['relevance_score'], reverse=True)
        return ranked[:CommunityRules.MAX_POSTS]

    def summarize(self, context, posts):
        posts_text = '\n\n'.join(
            f'[{i + 1}] (Score: {p["relevance_score"]}) {p["title"]}\n{p["body"][:300]}'
            for i, p in enumerate(posts)
        )
        prompt = SUMMARY_PROMPT.format(
            name=context.raw_input,
            categories=', '.join(context.category_keywords),
            posts=posts_text,
        )
        text = llm.complete([{'role': 'user', 'content': prompt}], temperature=0.1, max_tokens=800)
        return llm.extract_json(text) or {}

    def reviews_for(self, location_name, address=''):
        cache_key = CacheKeys.community_reviews(location_name, address)
        cached = cache.get(cache_key)
        if cached:
            return cached

        context = parse_search_context(location_name, address or '')
        posts = self.fetch_posts(context)
        logger.info(f'[COMMUNITY] {len(posts)} relevant posts for "{location_name}"')

        if not posts:
            return {
                'found_specific_reviews': False,
                'summary': 'No relevant discussions found.',
                'sentiment': 'neutral',
                'sources': [],
            }

        analysis = {}
        if llm.llm_configured():
            try:
                analysis = self.summarize(context, posts)
            except OpenAIError as e:
                logger.warning(f'[COMMUNITY] Summary failed for "{location_name}": {e}')
        if not analysis:
            analysis = {'summary': f'Found {len(posts)} related discussions.', 'sentiment': 'mixed'}

        result = {
            **analysis,
            'source_count': len(posts),
            'found_specific_reviews': any(
                p['relevance_score'] > CommunityRules.SPECIFIC_BUILDING_THRESHOLD for p in posts
            ),
            'sources': [
                {
                    'title': p['title'],
                    'url': p['url'],
                    'subreddit': p['subreddit'],
                    'score': p['score'],
                    'relevance_type': p['relevance_type'],
                }
                for p in posts
            ],
        }
        cache.set(cache_key, result, timeout=6 * 3600)
        return result
