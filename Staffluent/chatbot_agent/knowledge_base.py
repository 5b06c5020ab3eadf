import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, TEXT, ReturnDocument
from pymongo.errors import OperationFailure
from werkzeug.exceptions import NotFound

from .history_manager import to_object_id
from .term_extractor import STOP_WORDS, tokenize

logger = logging.getLogger(__name__)

CATEGORY_MAP = {
    'chat': ['communication', 'features'],
    'message': ['communication', 'features'],
    'messaging': ['communication', 'features'],
    'communication': ['communication', 'features'],
    'project': ['project_management', 'features'],
    'task': ['task_management', 'features'],
    'time': ['time_tracking', 'features'],
    'team': ['team_management', 'features'],
    'report': ['reporting', 'features'],
    'client': ['client_management', 'features'],
}


def extract_keywords(text: str) -> List[str]:
    tokens = [token for token in tokenize(text or '') if len(token) > 2 and token not in STOP_WORDS]
    return list(dict.fromkeys(tokens))


class KnowledgeBase:
    """
    Knowledge documents, learned query/response pairs and the queue of
    questions the chatbot could not answer.
    """

    def __init__(self, mongodb_db):
        self.documents_collection = mongodb_db.Knowledge_Documents
        self.pairs_collection = mongodb_db.Query_Response_Pairs
        self.unrecognized_collection = mongodb_db.Unrecognized_Queries

    def ensure_indexes(self):
        self.documents_collection.create_index([("active", ASCENDING)])
        self.documents_collection.create_index([("title", TEXT), ("content", TEXT), ("keywords", TEXT)])
        self.documents_collection.create_index([("categories", ASCENDING)])
        self.pairs_collection.create_index([("query", TEXT), ("keywords", TEXT)])
        self.pairs_collection.create_index([("category", ASCENDING), ("clientId", ASCENDING)])
        # $text inside $or needs every other branch indexed too
        self.pairs_collection.create_index([("keywords", ASCENDING)])
        self.unrecognized_collection.create_index([("status", ASCENDING)])
        self.unrecognized_collection.create_index([("frequency", DESCENDING)])

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create_document(self, title: str, content: str, client_id: str, keywords: Optional[List[str]] = None,
                        categories: Optional[List[str]] = None, type: str = 'article',
                        applicable_business_types: Optional[List[str]] = None,
                        applicable_features: Optional[List[str]] = None) -> Dict:
        now = datetime.now(timezone.utc)
        doc = {
            "title": title,
            "content": content,
            "keywords": keywords or extract_keywords(f"{title} {content}")[:20],
            "type": type,
            "categories": categories or [],
            "applicableBusinessTypes": applicable_business_types or [],
            "applicableFeatures": applicable_features or [],
            "clientId": client_id,
            "active": True,
            "useCount": 0,
            "createdAt": now,
            "updatedAt": now
        }
        doc['_id'] = self.documents_collection.insert_one(doc).inserted_id
        return doc

    def search_documents(self, query: str, client_id: Optional[str] = None, business_type: str = 'default',
                         features: Optional[List[str]] = None, current_view: Optional[str] = None,
                         limit: int = 5) -> List[Dict]:
        """
        Search active documents by keyword/title, full text and category, then
        rank the merged results and drop those not meant for this business.
        """
        if not query or not query.strip():
            return []

        normalized = query.lower().strip()
        base_query = {"active": True}
        if client_id:
            base_query["clientId"] = client_id

        try:
            combined = self._combine_and_rank(
                self._search_by_keywords(normalized, base_query, limit),
                self._search_by_full_text(normalized, base_query, limit),
                self._search_by_category(normalized, base_query, limit)
            )
        except OperationFailure as e:
            logger.error("Error searching documents: %s", e)
            return []

        results = self._filter_by_business_context(combined, business_type, features or [])
        logger.info("Search for %r (view %s) returned %d results", query, current_view, len(results))
        return results[:limit]

    def _search_by_keywords(self, query: str, base_query: Dict, limit: int) -> List[Dict]:
        terms = [term for term in query.split() if len(term) > 2]
        if not terms:
            return []

        conditions = [
            {"$or": [
                {"keywords": {"$regex": re.escape(term), "$options": "i"}},
                {"title": {"$regex": re.escape(term), "$options": "i"}}
            ]}
            for term in terms
        ]
        docs = self.documents_collection.find(dict(base_query, **{"$and": conditions})).limit(limit * 2)
        return [dict(doc, searchScore=self._keyword_score(doc, terms), searchMethod='keywords') for doc in docs]

    def _search_by_full_text(self, query: str, base_query: Dict, limit: int) -> List[Dict]:
        try:
            docs = list(
                self.documents_collection.find(
                    dict(base_query, **{"$text": {"$search": query}}),
                    {"score": {"$meta": "textScore"}, "title": 1, "content": 1, "keywords": 1,
                     "categories": 1, "applicableBusinessTypes": 1, "applicableFeatures": 1, "clientId": 1}
                ).sort([("score", {"$meta": "textScore"})]).limit(limit * 2)
            )
        except OperationFailure as e:
            logger.warning("Full-text search failed, using regex fallback: %s", e)
            return self._search_by_regex(query, base_query, limit)
        return [dict(doc, searchScore=doc.get('score', 0), searchMethod='fulltext') for doc in docs]

    def _search_by_regex(self, query: str, base_query: Dict, limit: int) -> List[Dict]:
        pattern = re.escape(query)
        docs = self.documents_collection.find(dict(base_query, **{"$or": [
            {"content": {"$regex": pattern, "$options": "i"}},
            {"title": {"$regex": pattern, "$options": "i"}}
        ]})).limit(limit * 2)
        return [dict(doc, searchScore=self._content_score(doc, query), searchMethod='regex') for doc in docs]

    def _search_by_category(self, query: str, base_query: Dict, limit: int) -> List[Dict]:
        categories = []
        for term in query.split():
            for category in CATEGORY_MAP.get(term, []):
                if category not in categories:
                    categories.append(category)
        if not categories:
            return []

        docs = self.documents_collection.find(dict(base_query, categories={"$in": categories})).limit(limit * 2)
        return [
            dict(doc, searchScore=5 * len(set(doc.get('categories') or []) & set(categories)), searchMethod='category')
            for doc in docs
        ]

    @staticmethod
    def _keyword_score(doc: Dict, terms: List[str]) -> float:
        title = (doc.get('title') or '').lower()
        keywords = [k.lower() for k in doc.get('keywords') or []]
        content = (doc.get('content') or '').lower()

        score = 0
        for term in terms:
            if term in title:
                score += 10
            if any(term in k for k in keywords):
                score += 8
            if term in content:
                score += 3
            if term[:max(3, len(term) - 1)] in title:
                score += 2
        return score

    @staticmethod
    def _content_score(doc: Dict, query: str) -> float:
        title = (doc.get('title') or '').lower()
        keywords = ' '.join(doc.get('keywords') or []).lower()
        content = (doc.get('content') or '').lower()
        return title.count(query) * 10 + keywords.count(query) * 8 + content.count(query) * 2

    @staticmethod
    def _combine_and_rank(keyword_results, text_results, category_results) -> List[Dict]:
        ranked = {}

        for doc in keyword_results:
            key = str(doc['_id'])
            if key not in ranked or ranked[key]['searchScore'] < doc['searchScore']:
                ranked[key] = dict(doc, searchScore=doc['searchScore'] * 1.5)

        for weight_new, weight_existing, results in ((1.0, 0.8, text_results), (0.5, 0.3, category_results)):
            for doc in results:
                key = str(doc['_id'])
                existing = ranked.get(key)
                if existing is None:
                    ranked[key] = dict(doc, searchScore=doc['searchScore'] * weight_new)
                else:
                    existing['searchScore'] += doc['searchScore'] * weight_existing
                    existing['searchMethod'] += f", {doc['searchMethod']}"

        return sorted(ranked.values(), key=lambda d: d['searchScore'], reverse=True)

    @staticmethod
    def _filter_by_business_context(results: List[Dict], business_type: str, features: List[str]) -> List[Dict]:
        filtered = []
        for doc in results:
            business_types = doc.get('applicableBusinessTypes') or []
            if business_types and business_type != 'default' \
                    and business_type not in business_types and 'all' not in business_types:
                continue
            doc_features = doc.get('applicableFeatures') or []
            if features and doc_features and 'all' not in doc_features \
                    and not any(feature in features for feature in doc_features):
                continue
            filtered.append(doc)
        return filtered

    # ------------------------------------------------------------------
    # Learned query/response pairs
    # ------------------------------------------------------------------

    def create_query_response_pair(self, query: str, response: str, category: str = 'general',
                                   keywords: Optional[List[str]] = None, client_id: Optional[str] = None) -> Dict:
        now = datetime.now(timezone.utc)
        pair = {
            "query": query,
            "response": response,
            "category": category,
            "keywords": keywords or extract_keywords(query),
            "clientId": client_id,
            "active": True,
            "useCount": 0,
            "successRate": 0,
            "createdAt": now,
            "updatedAt": now
        }
        pair['_id'] = self.pairs_collection.insert_one(pair).inserted_id
        return pair

    def search_query_responses(self, query: str, category: Optional[str] = None, limit: int = 3,
                               client_id: Optional[str] = None) -> List[Dict]:
        search_filter = {
            "active": True,
            "$or": [
                {"$text": {"$search": query}},
                {"keywords": {"$in": extract_keywords(query)}}
            ]
        }
        if category:
            search_filter["category"] = category
        if client_id:
            search_filter["clientId"] = client_id

        try:
            return list(
                self.pairs_collection.find(search_filter, {"score": {"$meta": "textScore"}})
                .sort([("score", {"$meta": "textScore"}), ("useCount", DESCENDING), ("successRate", DESCENDING)])
                .limit(limit)
            )
        except OperationFailure as e:
            logger.error("Error searching learned responses: %s", e)
            return []

    def record_pair_use(self, pair_id) -> bool:
        """Count one use of a learned pair that was actually served."""
        object_id = to_object_id(pair_id)
        if object_id is None:
            return False
        result = self.pairs_collection.update_one({"_id": object_id}, {"$inc": {"useCount": 1}})
        return result.matched_count > 0

    def update_response_success(self, pair_id, was_helpful: bool, client_id: Optional[str] = None) -> Dict:
        pair_filter = {"_id": to_object_id(pair_id)}
        if client_id:
            pair_filter["clientId"] = client_id

        pair = self.pairs_collection.find_one(pair_filter) if pair_filter["_id"] else None
        if not pair:
            raise NotFound(f"Query-response pair with ID {pair_id} not found")

        total_uses = pair.get('useCount', 0)
        success_count = round(pair.get('successRate', 0) * total_uses / 100)
        if was_helpful:
            success_count += 1
        success_rate = (success_count / (total_uses + 1)) * 100 if total_uses > 0 else 0

        return self.pairs_collection.find_one_and_update(
            {"_id": pair['_id']},
            {"$set": {"successRate": success_rate, "updatedAt": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER
        )

    def cleanup_bad_responses(self, patterns) -> int:
        total_deleted = 0
        for pattern in patterns:
            total_deleted += self.pairs_collection.delete_many({"response": pattern}).deleted_count
        return total_deleted

    # ------------------------------------------------------------------
    # Unrecognized queries
    # ------------------------------------------------------------------

    def log_unrecognized_query(self, message: str, client_id: Optional[str] = None,
                               business_type: Optional[str] = None, user_id: Optional[str] = None,
                               session_id: Optional[str] = None, context: Optional[Dict] = None) -> Dict:
        existing_filter = {"message": {"$regex": f"^{re.escape(message)}$", "$options": "i"}}
        if client_id:
            existing_filter["clientId"] = client_id

        existing = self.unrecognized_collection.find_one(existing_filter)
        if existing:
            update = {"$inc": {"frequency": 1}, "$set": {"updatedAt": datetime.now(timezone.utc)}}
            if context:
                update["$set"]["context"] = dict(existing.get('context') or {}, **context)
            return self.unrecognized_collection.find_one_and_update(
                {"_id": existing['_id']}, update, return_document=ReturnDocument.AFTER
            )

        now = datetime.now(timezone.utc)
        query = {
            "message": message,
            "clientId": client_id,
            "businessType": business_type,
            "userId": user_id,
            "sessionId": session_id,
            "context": context or {},
            "status": "pending",
            "resolved": False,
            "frequency": 1,
            "createdAt": now,
            "updatedAt": now
        }
        query['_id'] = self.unrecognized_collection.insert_one(query).inserted_id
        return query

    def get_pending_queries(self, client_id: Optional[str] = None, limit: int = 20, page: int = 1) -> Dict:
        query_filter = {"status": "pending"}
        if client_id:
            query_filter["clientId"] = client_id

        total = self.unrecognized_collection.count_documents(query_filter)
        queries = list(
            self.unrecognized_collection.find(query_filter)
            .sort([("frequency", DESCENDING), ("createdAt", DESCENDING)])
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return {"queries": queries, "total": total, "page": page, "limit": limit}

    def respond_to_unrecognized_query(self, query_id, response: str, client_id: Optional[str] = None) -> Dict:
        """Answer a pending query and store the answer as a learned pair."""
        query_filter = {"_id": to_object_id(query_id)}
        if client_id:
            query_filter["clientId"] = client_id

        query = self.unrecognized_collection.find_one(query_filter) if query_filter["_id"] else None
        if not query:
            raise NotFound(f"Unrecognized query with ID {query_id} not found")

        self.create_query_response_pair(
            query=query['message'],
            response=response,
            category=(query.get('context') or {}).get('currentView') or 'general',
            client_id=client_id
        )

        return self.unrecognized_collection.find_one_and_update(
            {"_id": query['_id']},
            {"$set": {
                "response": response,
                "status": "answered",
                "resolved": True,
                "answeredAt": datetime.now(timezone.utc)
            }},
            return_document=ReturnDocument.AFTER
        )
