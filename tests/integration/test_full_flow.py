import pytest
from httpx import AsyncClient
from fastapi import status


class TestFullContactFlow:
    """전체 관계 플로우 통합 테스트"""

    @pytest.mark.asyncio
    async def test_request_accept_remove_flow(self, client: AsyncClient, notifier, make_user, make_headers):
        """
        요청 -> 수락 -> 삭제 플로우:
        1. A가 B에게 친구 요청 (B 채널로 newFriendRequest)
        2. B가 수락 (A 채널로 friendRequestAccepted, B 채널로 newFriendAdded)
        3. 양쪽 친구 목록 확인
        4. A가 친구 삭제 (B 채널로 friendRemoved)
        """
        alice = await make_user("alice", display_name="Alice")
        bob = await make_user("bob", display_name="Bob")
        alice_id, bob_id = alice.id, bob.id
        headers_a = make_headers(alice)
        headers_b = make_headers(bob)
        channel_a, channel_b = f"user_{alice_id}", f"user_{bob_id}"

        # 1. A가 B에게 친구 요청
        request = await client.post(f"/contacts/requests/{bob_id}", headers=headers_a)
        assert request.status_code == status.HTTP_201_CREATED
        relationship = request.json()["relationship"]
        assert relationship["status"] == "pending"
        assert [event.event_name for event in notifier.events_for(channel_b)] == ["newFriendRequest"]
        assert notifier.events_for(channel_b)[0].relationship_id == relationship["id"]

        received = await client.get("/contacts/requests/received", headers=headers_b)
        assert [entry["username"] for entry in received.json()["received_requests"]] == ["alice"]

        # 2. B가 수락
        notifier.clear()
        accept = await client.post(
            f"/contacts/requests/{relationship['id']}/respond",
            json={"action": "accept"},
            headers=headers_b
        )
        assert accept.status_code == status.HTTP_200_OK
        assert accept.json()["relationship"]["status"] == "accepted"

        assert [event.event_name for event in notifier.events_for(channel_a)] == ["friendRequestAccepted"]
        assert [event.event_name for event in notifier.events_for(channel_b)] == ["newFriendAdded"]
        assert notifier.events_for(channel_a)[0].new_friend["username"] == "bob"
        assert notifier.events_for(channel_b)[0].new_friend["username"] == "alice"

        # 3. 친구 목록 확인
        friends_a = await client.get("/contacts/friends", headers=headers_a)
        friends_b = await client.get("/contacts/friends", headers=headers_b)
        assert [friend["id"] for friend in friends_a.json()["friends"]] == [bob_id]
        assert [friend["id"] for friend in friends_b.json()["friends"]] == [alice_id]

        # 4. A가 친구 삭제
        notifier.clear()
        remove = await client.post(f"/contacts/friends/{bob_id}/remove", headers=headers_a)
        assert remove.status_code == status.HTTP_200_OK
        assert notifier.event_names == ["friendRemoved"]
        assert notifier.published[0][0] == channel_b
        assert notifier.published[0][1].friend_id == alice_id

        status_after = await client.get(f"/contacts/status/{bob_id}", headers=headers_a)
        assert status_after.json()["status"] == "none"

        friends_b = await client.get("/contacts/friends", headers=headers_b)
        assert friends_b.json()["friends"] == []

    @pytest.mark.asyncio
    async def test_block_twice_keeps_single_row(self, client: AsyncClient, notifier, make_user, make_headers):
        """
        차단 플로우:
        1. 관계 없는 상태에서 차단 -> 201, youWereBlocked
        2. 다시 차단 -> 200, 같은 관계 행 유지
        3. 차단 해제 후 친구 요청 가능
        """
        carol = await make_user("carol")
        dave = await make_user("dave")
        carol_id, dave_id = carol.id, dave.id
        headers_c = make_headers(carol)
        headers_d = make_headers(dave)

        first = await client.post(f"/contacts/block/{dave_id}", headers=headers_c)
        assert first.status_code == status.HTTP_201_CREATED
        row = first.json()["relationship"]
        assert row["requester_id"] == carol_id
        assert row["addressee_id"] == dave_id
        assert row["status"] == "blocked"
        assert notifier.event_names == ["youWereBlocked"]

        second = await client.post(f"/contacts/block/{dave_id}", headers=headers_c)
        assert second.status_code == status.HTTP_200_OK
        assert second.json()["relationship"]["id"] == row["id"]

        blocked = await client.get("/contacts/blocked", headers=headers_c)
        assert [user["id"] for user in blocked.json()["blocked_users"]] == [dave_id]

        # 차단된 사용자는 요청 불가, 차단 해제도 불가
        request = await client.post(f"/contacts/requests/{carol_id}", headers=headers_d)
        assert request.status_code == status.HTTP_409_CONFLICT
        unblock_by_target = await client.post(f"/contacts/unblock/{carol_id}", headers=headers_d)
        assert unblock_by_target.status_code == status.HTTP_401_UNAUTHORIZED

        unblock = await client.post(f"/contacts/unblock/{dave_id}", headers=headers_c)
        assert unblock.status_code == status.HTTP_200_OK
        assert notifier.event_names == ["youWereBlocked", "youWereUnblocked"]

        request = await client.post(f"/contacts/requests/{dave_id}", headers=headers_c)
        assert request.status_code == status.HTTP_201_CREATED
