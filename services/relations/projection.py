"""Public projections of joined profiles / targets.

只挑视图需要的身份字段；password_hash、email 这类内部字段永远不会被投影出去。
"""

from datetime import datetime
from typing import Any, Dict, Optional

from services.db.models import Comment, Tweet, User, Video
from services.utils.timezone import make_aware


def iso(dt: Optional[datetime]) -> Optional[str]:
    return make_aware(dt).isoformat() if dt else None


def project_user(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "fullName": user.full_name,
        "avatar": user.avatar,
    }


def project_video(video: Video) -> Dict[str, Any]:
    return {
        "id": video.id,
        "title": video.title,
        "thumbnail": video.thumbnail,
        "duration": video.duration,
        "views": video.views,
        "createdAt": iso(video.created_at),
    }


def project_comment(comment: Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "content": comment.content,
        "videoId": comment.video_id,
        "tweetId": comment.tweet_id,
        "createdAt": iso(comment.created_at),
    }


def project_tweet(tweet: Tweet) -> Dict[str, Any]:
    return {
        "id": tweet.id,
        "content": tweet.content,
        "image": tweet.image,
        "createdAt": iso(tweet.created_at),
    }


PROJECTORS = {
    User: project_user,
    Video: project_video,
    Comment: project_comment,
    Tweet: project_tweet,
}


def project(row) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return PROJECTORS[type(row)](row)
