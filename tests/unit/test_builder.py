from resultfold.core.models import ResultRecord
from resultfold.folding.builder import build_forest, flatten_forest, fold_result, promote_parent


def make_results(count: int) -> list[ResultRecord]:
    return [ResultRecord(unique_id=f"uniqueId{n}", title=f"Title{n}") for n in range(count)]


def tree(record: ResultRecord) -> dict:
    return {
        "id": record.unique_id,
        "attachments": [tree(attachment) for attachment in record.attachments],
    }


def ids(records: list[ResultRecord]) -> list[str]:
    return [record.unique_id for record in records]


def _thread_fixture() -> list[ResultRecord]:
    # 0 - 1
    #   - 2 - 3
    # 4 - 5
    # 6
    results = make_results(7)
    results[1].parent_result = results[0]
    results[2].parent_result = results[0]
    results[3].parent_result = results[2]
    results[5].parent_result = results[4]
    return results


def test_build_forest_sets_attachments_and_child_results():
    results = _thread_fixture()
    top = results.pop(0)
    top.child_results = results

    folded = build_forest(top)

    assert folded is top
    assert [tree(attachment) for attachment in top.attachments] == [
        {"id": "uniqueId1", "attachments": []},
        {"id": "uniqueId2", "attachments": [{"id": "uniqueId3", "attachments": []}]},
    ]
    assert [tree(child) for child in top.child_results] == [
        {"id": "uniqueId4", "attachments": [{"id": "uniqueId5", "attachments": []}]},
        {"id": "uniqueId6", "attachments": []},
    ]


def test_build_forest_sorts_by_original_position():
    # Priority is 3, 5, 4, 1, 2, 0 under top result 6:
    # 0 - 2 - 3
    #   - 1
    # 4 - 5
    results = _thread_fixture()
    top = results[6]
    top.child_results = [results[3], results[5], results[4], results[1], results[2], results[0]]

    build_forest(top)

    assert top.attachments == []
    assert [tree(child) for child in top.child_results] == [
        {
            "id": "uniqueId0",
            "attachments": [
                {"id": "uniqueId2", "attachments": [{"id": "uniqueId3", "attachments": []}]},
                {"id": "uniqueId1", "attachments": []},
            ],
        },
        {"id": "uniqueId4", "attachments": [{"id": "uniqueId5", "attachments": []}]},
    ]


def test_build_forest_removes_duplicates_loaded_through_parent():
    results = _thread_fixture()
    results.extend([results[0], results[2], results[3], results[5], results[6]])
    top = results.pop(0)
    top.child_results = results

    build_forest(top)

    assert ids(top.attachments) == ["uniqueId1", "uniqueId2"]
    assert ids(top.attachments[1].attachments) == ["uniqueId3"]
    assert ids(top.child_results) == ["uniqueId4", "uniqueId6"]
    assert ids(top.child_results[0].attachments) == ["uniqueId5"]
    assert len(flatten_forest(top)) == 6


def test_duplicate_keeps_first_instance_at_nested_position():
    top = ResultRecord(unique_id="uniqueId0")
    flat_copy = ResultRecord(unique_id="uniqueId1", title="Flat copy")
    nested_copy = ResultRecord(unique_id="uniqueId1", title="Nested copy", parent_result=top)
    top.child_results = [flat_copy, nested_copy]

    build_forest(top)

    assert top.child_results == []
    assert len(top.attachments) == 1
    assert top.attachments[0] is flat_copy
    assert flat_copy.parent_result is top


def test_unresolved_parent_degrades_to_child_result():
    top, orphan, sibling = make_results(3)
    ghost = ResultRecord(unique_id="ghost")
    orphan.parent_result = ghost
    top.child_results = [orphan, sibling]

    build_forest(top)

    assert top.attachments == []
    assert ids(top.child_results) == ["uniqueId1", "uniqueId2"]
    assert orphan.parent_result is ghost


def test_parent_is_resolved_by_unique_id():
    top, parent, child = make_results(3)
    child.parent_result = ResultRecord(unique_id="uniqueId1", title="Deserialized separately")
    top.child_results = [parent, child]

    build_forest(top)

    assert ids(top.child_results) == ["uniqueId1"]
    assert parent.attachments == [child]
    assert child.parent_result is parent


def test_empty_flat_list_yields_empty_forest():
    top = ResultRecord(unique_id="top")

    build_forest(top)

    assert top.attachments == []
    assert top.child_results == []


def test_records_attached_to_top_are_not_nested():
    top, *others = make_results(4)
    for record in others:
        record.parent_result = top
    top.child_results = list(others)

    build_forest(top)

    assert top.child_results == []
    assert ids(top.attachments) == ["uniqueId1", "uniqueId2", "uniqueId3"]
    assert all(record.attachments == [] for record in others)


def test_self_referencing_parent_is_a_root():
    top, record = make_results(2)
    record.parent_result = record
    top.child_results = [record]

    build_forest(top)

    assert top.child_results == [record]


def test_cyclic_parent_chain_is_left_out():
    top, first, second, plain = make_results(4)
    first.parent_result = second
    second.parent_result = first
    top.child_results = [first, second, plain]

    build_forest(top)

    assert top.attachments == []
    assert top.child_results == [plain]


def test_folding_flattened_forest_again_is_stable():
    results = _thread_fixture()
    top = results[6]
    top.child_results = [results[3], results[5], results[4], results[1], results[2], results[0]]
    build_forest(top)
    before = [tree(child) for child in top.child_results]

    top.child_results = flatten_forest(top)
    build_forest(top)

    assert [tree(child) for child in top.child_results] == before
    assert top.attachments == []


def test_flatten_forest_lists_attachments_before_child_results():
    results = _thread_fixture()
    top = results.pop(0)
    top.child_results = results
    build_forest(top)

    assert ids(flatten_forest(top)) == [
        "uniqueId1",
        "uniqueId2",
        "uniqueId3",
        "uniqueId4",
        "uniqueId5",
        "uniqueId6",
    ]


def test_promote_parent_anchors_group_on_parent():
    parent = ResultRecord(unique_id="uniqueIdParent", title="TitleParentResult", flags="ContainsAttachment")
    attachment = ResultRecord(
        unique_id="uniqueId0",
        title="Title0",
        flags="IsAttachment",
        parent_result=parent,
        total_number_of_child_results=3,
    )

    folded = fold_result(attachment)

    assert folded is parent
    assert folded.title == "TitleParentResult"
    assert folded.attachments == [attachment]
    assert folded.total_number_of_child_results == 3
    assert attachment.is_attachment
    assert parent.contains_attachment


def test_promote_parent_keeps_root_results():
    top = ResultRecord(unique_id="uniqueId0")

    assert promote_parent(top) is top
